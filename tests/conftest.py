"""Shared test fixtures for all test modules."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """
    Point HOME at a temporary directory and clear ORGDO_* overrides.

    Config defaults and log files are written below HOME, so every test
    gets its own copy and never touches the real user directories.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in ("ORGDO_STATES", "ORGDO_DEFAULT_STATE", "ORGDO_DEFAULT_FILE",
                 "ORGDO_AGENDA_DAYS", "ORGDO_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield home
    structlog.reset_defaults()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Temporary working directory for commands that default to ./todo.org."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work
