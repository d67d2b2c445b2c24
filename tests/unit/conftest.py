"""Shared fixtures for unit tests."""

import logging

import pytest

from tinyfs.bootstrap.config import ServerConfig


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("tinyfs")
    old_propagate = logger.propagate
    old_handlers = list(logger.handlers)
    old_level = logger.level
    logger.propagate = True
    yield
    logger.propagate = old_propagate
    logger.handlers[:] = old_handlers
    logger.setLevel(old_level)


@pytest.fixture()
def config() -> ServerConfig:
    """Configuration with a small file limit and a fast shutdown poll."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        shutdown_poll_ms=20,
        max_file_size_bytes=1024,
        accept_threads=2,
    )
