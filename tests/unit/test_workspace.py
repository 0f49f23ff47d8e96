"""Unit tests for the run workspace scope."""

import os
import signal

import pytest

from release_linker.core.workspace import temporary_workspace


def test_removed_after_normal_exit():
    with temporary_workspace() as path:
        (path / "artifact.tar.gz").write_bytes(b"x")
        assert path.is_dir()
    assert not path.exists()


def test_removed_after_exception():
    with pytest.raises(RuntimeError):
        with temporary_workspace() as path:
            raise RuntimeError("boom")
    assert not path.exists()


def test_removed_after_keyboard_interrupt():
    with pytest.raises(KeyboardInterrupt):
        with temporary_workspace() as path:
            raise KeyboardInterrupt
    assert not path.exists()


@pytest.mark.skipif(not hasattr(signal, "SIGTERM"), reason="no SIGTERM")
def test_sigterm_triggers_cleanup_and_restores_handler():
    previous = signal.getsignal(signal.SIGTERM)
    with pytest.raises(SystemExit) as exc_info:
        with temporary_workspace() as path:
            os.kill(os.getpid(), signal.SIGTERM)
    assert exc_info.value.code == 128 + signal.SIGTERM
    assert not path.exists()
    assert signal.getsignal(signal.SIGTERM) == previous
