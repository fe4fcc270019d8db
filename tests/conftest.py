"""Shared fixtures for FieldCloak tests."""

import logging
from collections.abc import Generator

import pytest
import structlog

from fieldcloak.core.config import reset_config
from fieldcloak.core.discovery import clear_discovery_cache
from fieldcloak.core.authorization import Principal
from fieldcloak.serialization.redactor import set_default_redactor


@pytest.fixture
def admin() -> Principal:
    """Authenticated principal holding ROLE_ADMIN."""
    return Principal(name="alice", roles=frozenset({"ROLE_ADMIN", "ROLE_USER"}))


@pytest.fixture
def regular_user() -> Principal:
    """Authenticated principal without administrative roles."""
    return Principal(name="bob", roles=frozenset({"ROLE_USER"}))


@pytest.fixture
def anonymous() -> Principal:
    """Unauthenticated caller."""
    return Principal.anonymous()


@pytest.fixture(autouse=True)
def isolate_test_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Reset global/cached state between tests to guarantee isolation.

    Discovery results, the process-wide configuration and the default
    serialization redactor are all shared across the process.
    """
    for key in (
        "FIELDCLOAK_PRINCIPAL_KEY",
        "FIELDCLOAK_LOG_REDACTION",
        "FIELDCLOAK_MASKED_OBJECT_TEMPLATE",
        "FIELDCLOAK_LOG_LEVEL",
        "FIELDCLOAK_LOG_FORMAT",
        "FIELDCLOAK_LOG_OUTPUT",
        "FIELDCLOAK_LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)

    clear_discovery_cache()
    reset_config()
    set_default_redactor(None)

    yield

    clear_discovery_cache()
    reset_config()
    set_default_redactor(None)
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def restore_logger_propagation() -> Generator[None, None, None]:
    """Restore ``propagate`` flags that tests change on named stdlib loggers."""
    manager = logging.Logger.manager
    saved = {
        name: logger.propagate
        for name, logger in manager.loggerDict.items()
        if isinstance(logger, logging.Logger)
    }
    yield
    for name, logger in list(manager.loggerDict.items()):
        if isinstance(logger, logging.Logger):
            logger.propagate = saved.get(name, True)
