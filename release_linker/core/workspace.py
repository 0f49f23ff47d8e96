"""Temporary working directory for a deployment run."""

import shutil
import signal
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

# Signals turned into SystemExit while a workspace is open, so cleanup runs
TERMINATION_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None))
    if sig is not None
)


def _raise_system_exit(signum, _frame):
    raise SystemExit(128 + signum)


@contextmanager
def temporary_workspace(prefix: str = "release-linker-") -> Iterator[Path]:
    """
    Create the run's temporary directory and remove it on every exit path.

    Normal return, exceptions, KeyboardInterrupt and SIGTERM/SIGHUP all end
    up in the finally block. Previous signal handlers are restored on exit.

    Yields:
        Path of the temporary directory
    """
    previous_handlers = {}
    try:
        for sig in TERMINATION_SIGNALS:
            previous_handlers[sig] = signal.signal(sig, _raise_system_exit)
    except ValueError:
        # signal.signal only works in the main thread
        previous_handlers.clear()

    path = Path(tempfile.mkdtemp(prefix=prefix))
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        for sig, handler in previous_handlers.items():
            signal.signal(sig, handler)
