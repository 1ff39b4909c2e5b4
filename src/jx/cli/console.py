"""CLI console helpers.

Rich is imported lazily so that bootstrap paths (``--help``,
``--version``) do not pay for it.  All output goes to stderr; stdout
belongs to the programs launched by ``jx run``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from jx.exceptions import EnvironmentCheckError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` or raise ``EnvironmentCheckError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentCheckError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


@lru_cache(maxsize=1)
def get_rich_console() -> Any:
	"""Return the shared Rich console targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True, highlight=False)


class _ConsoleProxy:
	"""``print``-compatible proxy resolving the Rich console on first use."""

	def print(self, *objects: object, **kwargs: Any) -> None:
		get_rich_console().print(*objects, **kwargs)


console = _ConsoleProxy()
