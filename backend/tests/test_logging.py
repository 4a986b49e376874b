from __future__ import annotations

import logging
import os

import pytest

from statics_solver_backend.main import create_app
from statics_solver_backend.services.logging_setup import (
    LOG_DIR_ENV,
    PACKAGE_LOGGER,
    resolve_log_path,
    setup_logging,
    teardown_logging,
)


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    teardown_logging()
    yield logger
    teardown_logging()


def test_create_app_has_no_logging_side_effects(tmp_path, monkeypatch, package_logger):
    """Building the app neither creates a log directory nor attaches handlers."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(LOG_DIR_ENV, raising=False)

    create_app()

    assert not (tmp_path / "logs").exists()
    assert package_logger.handlers == []


def test_setup_logging_is_idempotent(tmp_path, package_logger):
    """A second call keeps the handlers installed by the first."""
    setup_logging(str(tmp_path))
    handlers = list(package_logger.handlers)
    setup_logging(str(tmp_path))

    assert len(handlers) == 2
    assert package_logger.handlers == handlers
    assert os.path.exists(resolve_log_path(str(tmp_path)))


def test_log_directory_from_environment(tmp_path, monkeypatch):
    """The environment overrides the configured log directory."""
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path / "custom"))

    assert resolve_log_path() == os.path.join(str(tmp_path / "custom"), "statics_solver.log")
    assert resolve_log_path(str(tmp_path)) == os.path.join(str(tmp_path), "statics_solver.log")


@pytest.mark.asyncio
async def test_lifespan_installs_and_removes_handlers(tmp_path, monkeypatch, package_logger):
    """Handlers exist only while the application is running."""
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path / "run"))
    app = create_app()

    async with app.router.lifespan_context(app):
        assert len(package_logger.handlers) == 2
        assert (tmp_path / "run" / "statics_solver.log").exists()

    assert package_logger.handlers == []
