"""
Project registry.

The resolver only needs an existence check: it separates "project has no
bands" (no approval required) from "project does not exist" (an error).
"""
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ...models.procurement import Project


class ProjectRegistryBase(ABC):
    @abstractmethod
    def exists(self, project_id: str) -> bool:
        pass

    @abstractmethod
    def get(self, project_id: str) -> Optional[Project]:
        pass

    @abstractmethod
    def register(self, project: Project) -> Project:
        pass

    @abstractmethod
    def list_all(self) -> list[Project]:
        pass


class InMemoryProjectRegistry(ProjectRegistryBase):
    def __init__(self, projects: Optional[list[Project]] = None):
        self._projects: Dict[str, Project] = {}
        self._lock = threading.Lock()
        for project in projects or []:
            self.register(project)

    def exists(self, project_id: str) -> bool:
        return project_id in self._projects

    def get(self, project_id: str) -> Optional[Project]:
        return self._projects.get(project_id)

    def register(self, project: Project) -> Project:
        with self._lock:
            self._projects[project.id] = project
        return project

    def list_all(self) -> list[Project]:
        return list(self._projects.values())
