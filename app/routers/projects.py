from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, insert, or_
from datetime import datetime, timezone
from typing import Dict, List, Sequence
from app.database import get_db
from app.core.auth import get_current_user, require_roles
from app.core.errors import ForbiddenError, NotFoundError
from app.models.project import Project, project_members
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.project import ProjectCreate, ProjectResponse, ProjectStatusUpdate

router = APIRouter(prefix="/api/projects", tags=["projects"])


async def load_members(db: AsyncSession, project_ids: Sequence[int]) -> Dict[int, List[int]]:
    members: Dict[int, List[int]] = {project_id: [] for project_id in project_ids}
    if not project_ids:
        return members
    result = await db.execute(
        select(project_members.c.project_id, project_members.c.user_id)
        .where(project_members.c.project_id.in_(project_ids))
        .order_by(project_members.c.user_id)
    )
    for project_id, user_id in result.all():
        members[project_id].append(user_id)
    return members


def to_response(project: Project, team_members: List[int]) -> ProjectResponse:
    response = ProjectResponse.model_validate(project)
    response.team_members = team_members
    return response


async def projects_for_user(db: AsyncSession, user_id: int) -> List[Project]:
    """Projects the user manages or is a member of."""
    member_of = select(project_members.c.project_id).where(project_members.c.user_id == user_id)
    result = await db.execute(
        select(Project)
        .where(or_(Project.manager_id == user_id, Project.id.in_(member_of)))
        .order_by(Project.created_at.desc(), Project.id.desc())
    )
    return list(result.scalars().all())


@router.post("", response_model=ApiResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles("manager", "admin"))
):
    team = sorted(set(project_in.team_members))
    if team:
        found = await db.execute(select(User.id).where(User.id.in_(team)))
        missing = set(team) - {row[0] for row in found.all()}
        if missing:
            raise HTTPException(400, f"Unknown team members: {sorted(missing)}")

    if project_in.end_date and project_in.end_date < project_in.start_date:
        raise HTTPException(400, "End date must not be before start date")

    project = Project(
        name=project_in.name,
        description=project_in.description,
        manager_id=current_user.id,
        start_date=project_in.start_date,
        end_date=project_in.end_date,
        status=project_in.status,
        priority=project_in.priority,
    )
    db.add(project)
    await db.flush()
    if team:
        await db.execute(
            insert(project_members),
            [{"project_id": project.id, "user_id": user_id} for user_id in team],
        )
    await db.commit()
    await db.refresh(project)
    return ApiResponse(data=to_response(project, team))


@router.get("/my", response_model=ApiResponse[List[ProjectResponse]])
async def get_my_projects(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    projects = await projects_for_user(db, current_user.id)
    members = await load_members(db, [p.id for p in projects])
    return ApiResponse(data=[to_response(p, members[p.id]) for p in projects])


@router.patch("/{project_id}/status", response_model=ApiResponse[ProjectResponse])
async def update_project_status(
    project_id: int,
    status_in: ProjectStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = await db.get(Project, project_id)
    if not project:
        raise NotFoundError("Project not found")
    if project.manager_id != current_user.id and current_user.role != "admin":
        raise ForbiddenError("Only the project manager or an admin can change the status")

    project.status = status_in.status
    project.updated_at = datetime.now(timezone.utc)
    db.add(project)
    await db.commit()
    await db.refresh(project)
    members = await load_members(db, [project.id])
    return ApiResponse(data=to_response(project, members[project.id]))
