"""Infrastructure layer — external system integration.

This layer wraps all interaction with git, child processes, the
registry file, and the executables on PATH.  Every raw ``OSError`` or
``subprocess`` failure must be caught here and re-raised as a
:class:`~jx.exceptions.JxError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from jx.infra.command_runner import SubprocessCommandRunner
from jx.infra.git_gateway import GitGateway
from jx.infra.registry_store import RegistryStore
from jx.infra.tool_detector import ToolStatus, detect_tool, require_tool, require_toolchain

__all__: list[str] = [
    "GitGateway",
    "RegistryStore",
    "SubprocessCommandRunner",
    "ToolStatus",
    "detect_tool",
    "require_tool",
    "require_toolchain",
]
