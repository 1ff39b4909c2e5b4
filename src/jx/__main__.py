"""Allow ``python -m jx`` invocation.

Delegates to the CLI error-boundary entry point so that ``python -m jx``
behaves identically to the ``jx`` console script.
"""

from __future__ import annotations

from jx.cli.app import cli

if __name__ == "__main__":
    cli()
