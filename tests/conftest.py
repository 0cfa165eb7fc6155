from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_strix_logger():
    """The CLI detaches the package logger from the root; put it back after each test."""
    logger = logging.getLogger("strix")
    handlers, propagate, level = logger.handlers[:], logger.propagate, logger.level
    yield
    logger.handlers[:] = handlers
    logger.propagate = propagate
    logger.setLevel(level)


@pytest.fixture
def write_binary(tmp_path):
    """Write bytes to a file under tmp_path and return its path as a string."""
    def _write(data, name="sample.bin"):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return _write
