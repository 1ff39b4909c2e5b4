"""Infrastructure: locate required executables and suggest installs.

jx shells out to ``git`` for every repository operation and expects a
JVM (``java``) for the Gradle builds it runs.  This module finds those
executables on PATH and provides platform-specific installation guidance
when one is missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from jx.exceptions import ToolNotFoundError

REQUIRED_TOOLS: tuple[str, ...] = ("git", "java")
"""Executables every lifecycle command depends on."""


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of probing PATH for one executable.

    Attributes
    ----------
    name : str
        Executable name without platform suffix (``"git"``).
    found : bool
        Whether the executable was located on PATH.
    path : Path | None
        Absolute path to the executable, or ``None``.
    install_commands : tuple[str, ...]
        Suggested shell commands for installing the tool on the current
        platform.  Empty when it is already present.
    """

    name: str
    found: bool
    path: Path | None
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_tool(name: str) -> ToolStatus:
    """Probe PATH for *name*.

    Returns a :class:`ToolStatus` whether or not the tool is present;
    the caller decides whether to abort or merely warn.
    """
    system = platform.system()
    candidate = f"{name}.exe" if system == "Windows" else name
    result = shutil.which(candidate)

    if result is not None:
        return ToolStatus(
            name=name,
            found=True,
            path=Path(result).resolve(),
            install_commands=(),
        )

    return ToolStatus(
        name=name,
        found=False,
        path=None,
        install_commands=_platform_install_commands(name, system),
    )


def require_tool(name: str) -> Path:
    """Locate *name* or raise :class:`ToolNotFoundError`."""
    status = detect_tool(name)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append(f"Install {name} using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        raise ToolNotFoundError(
            f"{name} is required but was not found on PATH.",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return status.path


def require_toolchain() -> dict[str, Path]:
    """Locate every tool in :data:`REQUIRED_TOOLS`, failing on the first miss."""
    return {name: require_tool(name) for name in REQUIRED_TOOLS}


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

_INSTALL_COMMANDS: dict[tuple[str, str], tuple[str, ...]] = {
    ("git", "windows"): ("winget install Git.Git", "choco install git"),
    ("git", "linux"): (
        "sudo apt install git",
        "sudo dnf install git",
        "sudo pacman -S git",
    ),
    ("git", "darwin"): ("brew install git", "xcode-select --install"),
    ("java", "windows"): (
        "winget install EclipseAdoptium.Temurin.21.JDK",
        "choco install temurin",
    ),
    ("java", "linux"): (
        "sudo apt install openjdk-21-jdk",
        "sudo dnf install java-21-openjdk-devel",
        "sudo pacman -S jdk21-openjdk",
    ),
    ("java", "darwin"): ("brew install --cask temurin",),
}

_DOWNLOAD_PAGES: dict[str, str] = {
    "git": "https://git-scm.com/downloads",
    "java": "https://adoptium.net/",
}


def _platform_install_commands(name: str, system: str) -> tuple[str, ...]:
    """Return install commands for *name* appropriate for *system*."""
    commands = _INSTALL_COMMANDS.get((name, system.lower()))
    if commands:
        return commands
    page = _DOWNLOAD_PAGES.get(name)
    if page is None:
        return ()
    return (f"Please install {name} from {page}",)
