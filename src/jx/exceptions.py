"""Custom exception hierarchy for jx.

All exceptions that cross layer boundaries must inherit from
:class:`JxError`.  Raw ``OSError`` / ``subprocess`` failures must NEVER
propagate beyond the infrastructure layer. They are caught there and
re-raised as a typed subclass defined here.

Hierarchy
---------
JxError
├── ValidationError
│   ├── NameRequiredError
│   ├── EmptyCommandError
│   ├── AlreadyInstalledError
│   ├── NotInstalledError
│   └── ConfigError
├── ExternalToolError
│   ├── CloneError
│   ├── NotARepositoryError
│   ├── DetachedOrEmptyRepoError
│   ├── FetchError
│   ├── CommandExecutionError
│   └── UninstallError
├── StateConsistencyError
│   └── RegistryCorruptError
├── StaleRecordError
│   └── InvalidInstallError
└── EnvironmentCheckError
    └── ToolNotFoundError
"""

from __future__ import annotations


class JxError(Exception):
    """Base exception for all jx errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Validation ------------------------------------------------------------

class ValidationError(JxError):
    """Raised for bad user input.  No state has been changed."""


class NameRequiredError(ValidationError):
    """Raised when an operation needs at least one project name."""


class EmptyCommandError(ValidationError):
    """Raised when a build or run command is blank."""


class AlreadyInstalledError(ValidationError):
    """Raised when installing a name that is already registered."""


class NotInstalledError(ValidationError):
    """Raised when a name does not resolve to a registered project."""


class ConfigError(ValidationError):
    """Raised when an environment setting holds an unusable value."""


# --- External tools --------------------------------------------------------

class ExternalToolError(JxError):
    """Raised when git, a build, or an executed program fails."""


class CloneError(ExternalToolError):
    """Raised when a repository cannot be cloned."""


class NotARepositoryError(ExternalToolError):
    """Raised when a path is not the top level of a git working copy."""


class DetachedOrEmptyRepoError(ExternalToolError):
    """Raised when HEAD does not resolve to a commit."""


class FetchError(ExternalToolError):
    """Raised when a repository cannot be synchronised with its remote."""


class CommandExecutionError(ExternalToolError):
    """Raised when an external command exits non-zero or cannot start."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.returncode: int | None = returncode
        """Exit status of the process, or ``None`` if it never started."""


class UninstallError(ExternalToolError):
    """Raised when a project directory cannot be deleted."""


# --- Persisted state -------------------------------------------------------

class StateConsistencyError(JxError):
    """Raised when persisted state cannot be trusted.  Always fatal."""


class RegistryCorruptError(StateConsistencyError):
    """Raised when the registry file is unreadable or malformed."""


class StaleRecordError(JxError):
    """Raised when a record no longer matches what is on disk."""


class InvalidInstallError(StaleRecordError):
    """Raised when a registered project's directory has disappeared."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentCheckError(JxError):
    """Raised when a required runtime precondition is not met."""


class ToolNotFoundError(EnvironmentCheckError):
    """Raised when a required executable cannot be located on PATH."""
