"""Shared pytest fixtures for mmpp tests."""

from pathlib import Path

import pytest

from mmpp.core import ir


@pytest.fixture
def blog_db_role() -> ir.Role:
    """Return the role metric used across the examples."""
    return ir.Role(service_name="Blog", role_name="db", metric_name="loadavg5")


@pytest.fixture
def two_host_group() -> ir.Group:
    """Return group(host(a, b), host(c, d))."""
    return ir.Group(
        metrics=[
            ir.Host(host_id="a", metric_name="b"),
            ir.Host(host_id="c", metric_name="d"),
        ]
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Run in an empty directory with no mmpp environment overrides."""
    monkeypatch.delenv("MMPP_MAX_DEPTH", raising=False)
    monkeypatch.delenv("MMPP_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
