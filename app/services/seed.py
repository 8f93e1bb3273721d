import logging
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User
from app.utils.password import hash_password

logger = logging.getLogger(__name__)

# (email, password, first_name, last_name, role, department)
DEMO_USERS = [
    ("admin@trackzen.com", "admin123", "System", "Administrator", "admin", "IT"),
    ("hr@trackzen.com", "hr123", "Sarah", "Johnson", "hr", "Human Resources"),
    ("manager@trackzen.com", "manager123", "John", "Smith", "manager", "Engineering"),
    ("employee@trackzen.com", "employee123", "Alice", "Brown", "employee", "Engineering"),
    ("interviewer@trackzen.com", "interviewer123", "Bob", "Wilson", "interviewer", "Engineering"),
]


async def seed_demo_data(db: AsyncSession) -> bool:
    """Create the demo accounts when the users table is empty. Returns True if it seeded."""
    existing = await db.execute(select(func.count(User.id)))
    if existing.scalar_one():
        logger.info("Users already present, skipping demo seed")
        return False

    users = {}
    for email, password, first_name, last_name, role, department in DEMO_USERS:
        user = User(
            email=email,
            hashed_password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            department=department,
        )
        db.add(user)
        users[role] = user
    await db.flush()

    users["employee"].manager_id = users["manager"].id
    await db.commit()
    logger.info("Seeded %d demo users", len(DEMO_USERS))
    return True
