"""
Projects API Endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.dependencies import get_current_user, get_db
from taskboard.models.user import User
from taskboard.schemas.project import ProjectCreate, ProjectOut
from taskboard.services import projects as project_service

router = APIRouter()


@router.get("/", response_model=List[ProjectOut])
async def list_projects(
    team_id: Optional[int] = Query(None, alias="teamId", gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List projects.

    With `teamId`, only that team's projects (membership required);
    otherwise the projects of every team the user belongs to.
    """
    return await project_service.list_projects(db, current_user, team_id)


@router.post("/", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a project in a team the user belongs to."""
    return await project_service.create_project(
        db, current_user, project_data.team_id, project_data.name, project_data.description
    )


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project(
    project_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await project_service.get_project(db, current_user, project_id)
