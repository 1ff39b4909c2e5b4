"""jx — JVM application executor.

Clones a git repository, builds it, remembers how to launch the result,
and later runs, upgrades, or removes it.
"""

from jx.version import __version__

__all__: list[str] = ["__version__"]
