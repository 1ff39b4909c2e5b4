"""Core / service layer — project lifecycle rules and domain models.

Rules
-----
* No ``print()`` calls.
* No subprocess or network I/O; git and external commands are reached
  only through the protocols in :mod:`jx.core.protocols`.
* Filesystem effects are limited to removing project directories the
  controller owns (install rollback, uninstall).
* No imports from ``cli`` or ``infra``.
"""

from jx.core.lifecycle import LifecycleController, derive_project_name, project_directory
from jx.core.models import ProjectRecord, Registry, Repository
from jx.core.protocols import CommandRunner, RepositoryGateway

__all__: list[str] = [
    "CommandRunner",
    "LifecycleController",
    "ProjectRecord",
    "Registry",
    "Repository",
    "RepositoryGateway",
    "derive_project_name",
    "project_directory",
]
