"""Live status display for long-running operations.

:func:`run_with_status` runs an arbitrary callable on a background
thread while the foreground polls for completion and animates a Rich
spinner.  It knows nothing about projects or git, so the lifecycle core
stays free of any UI dependency.

Design
------
* One worker thread per call; the returned :class:`~concurrent.futures.Future`
  is the single-shot completion signal carrying a result or an exception.
* The foreground loop wakes every *poll_interval* seconds; that is also
  where Ctrl+C lands.
* Ctrl+C stops the *display*, not the operation.  Clone, build, and git
  steps cannot be aborted safely mid-flight, so the call keeps waiting
  for the outcome and then returns or raises it as usual.  Further
  Ctrl+C presses during that wait are ignored.
* Child processes are started outside the terminal's foreground
  process group (see :func:`jx.infra.command_runner.detached_process_options`),
  so the interrupt signal never reaches them.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, TypeVar

from jx.cli.console import get_rich_console

T = TypeVar("T")

DEFAULT_POLL_INTERVAL: float = 0.1


def run_with_status(
    running: str,
    completed: str,
    operation: Callable[[], T],
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    console: Any | None = None,
) -> T:
    """Run *operation* in the background behind a spinner.

    Parameters
    ----------
    running:
        Text shown next to the spinner while *operation* runs.
    completed:
        Line printed once *operation* returns successfully.
    operation:
        Zero-argument callable to execute.
    poll_interval:
        Seconds between completion polls.
    console:
        Rich console to render on.  Defaults to the shared stderr console.

    Returns
    -------
    T
        Whatever *operation* returned.

    Raises
    ------
    Exception
        Whatever *operation* raised, unchanged.
    """
    target = console if console is not None else get_rich_console()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="jx-operation")
    try:
        future: Future[T] = executor.submit(operation)
        if not _poll_with_spinner(target, running, future, poll_interval):
            target.print("[yellow]Display stopped; waiting for the operation to finish…[/yellow]")
        result = _wait_for_result(future, poll_interval)
    finally:
        executor.shutdown(wait=False)

    target.print(completed)
    return result


def _poll_with_spinner(
    console: Any,
    running: str,
    future: Future[Any],
    poll_interval: float,
) -> bool:
    """Animate until *future* is done.

    Returns ``False`` when the display was cancelled with Ctrl+C before
    the operation finished.
    """
    with console.status(running, spinner="dots"):
        try:
            while not future.done():
                wait([future], timeout=poll_interval)
        except KeyboardInterrupt:
            return future.done()
    return True


def _wait_for_result(future: Future[T], poll_interval: float) -> T:
    """Block until *future* is done, ignoring further Ctrl+C presses.

    The caller persists state once this returns, so it must not return
    while the operation is still mutating that state.
    """
    while not future.done():
        try:
            wait([future], timeout=poll_interval)
        except KeyboardInterrupt:
            continue
    return future.result()
