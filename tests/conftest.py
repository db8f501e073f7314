"""Shared fixtures for the discovery pipeline test suite."""

from __future__ import annotations

import pytest

from config import Config
from observability.tracing import _context


@pytest.fixture
def config(tmp_path) -> Config:
    """Fully configured, fast-retrying configuration writing to tmp_path."""
    return Config(
        exa_api_key="exa-test",
        anthropic_api_key="sk-ant-test",
        store_backend="sqlite",
        db_path=tmp_path / "obituaries.db",
        log_dir=tmp_path / "log",
        max_retries=2,
        retry_base_delay=0.0,
        max_workers=2,
    )


@pytest.fixture
def bare_config(tmp_path) -> Config:
    """Configuration with no credentials at all."""
    return Config(
        db_path=tmp_path / "obituaries.db",
        log_dir=tmp_path / "log",
        retry_base_delay=0.0,
    )


@pytest.fixture(autouse=True)
def _no_tracing():
    _context.enabled = False
    yield
    _context.enabled = False
