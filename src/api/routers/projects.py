import uuid

from fastapi import APIRouter, Depends, status
from loguru import logger
from pydantic import BaseModel, Field

from ...core.errors import ConflictError
from ...models.procurement import Project
from ...services.storage.projects import ProjectRegistryBase
from ..deps import get_projects

router = APIRouter(prefix="/projects", tags=["projects"])


class CreateProjectRequest(BaseModel):
    id: str | None = None
    name: str = Field(min_length=1)
    code: str | None = None
    description: str | None = None


@router.get("", response_model=list[Project])
async def list_projects(projects: ProjectRegistryBase = Depends(get_projects)):
    return projects.list_all()


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(req: CreateProjectRequest, projects: ProjectRegistryBase = Depends(get_projects)):
    """
    Register a project so its authorization matrix can be configured.

    Returns 409 when the id is already taken.
    """
    project_id = req.id or uuid.uuid4().hex[:8]
    if projects.exists(project_id):
        raise ConflictError(f"Project already exists: {project_id}")

    project = projects.register(Project(
        id=project_id, name=req.name, code=req.code, description=req.description,
    ))
    logger.info("Project created", project_id=project.id, name=project.name)
    return project
