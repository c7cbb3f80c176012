# tests/conftest.py
"""Shared fixtures: an in-memory store and owner ids."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    # Ensure gridbase package is importable when running tests from repo root.
    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


OWNER = "user-alice"
OTHER_OWNER = "user-bob"


@pytest.fixture
def owner() -> str:
    return OWNER


@pytest.fixture
def other_owner() -> str:
    return OTHER_OWNER


@pytest.fixture
def store():
    from gridbase.store import InMemoryStore

    return InMemoryStore()
