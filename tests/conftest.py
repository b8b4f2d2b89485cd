"""Shared test fixtures and utilities."""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from package_versions.config import Settings
from package_versions.context import WorkspaceContext
from package_versions.session import Session
from package_versions.store import BaselineStore, WorkspaceState


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep environment overrides from leaking into settings."""
    monkeypatch.delenv("PACKAGE_VERSIONS_PACKAGE_MANAGER", raising=False)
    monkeypatch.delenv("PACKAGE_VERSIONS_DEBOUNCE_MS", raising=False)


@pytest.fixture
def workspace(tmp_path):
    """Resolved workspace root."""
    return tmp_path.resolve()


@pytest.fixture
def write_manifest(workspace):
    """Factory fixture to write package.json files relative to the workspace."""
    def _write(rel: str = "package.json", **fields) -> Path:
        path = workspace / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        manifest = {"name": path.parent.name, "version": "1.0.0"}
        manifest.update(fields)
        path.write_text(json.dumps(manifest, indent=2))
        return path
    return _write


@pytest.fixture
def ctx(workspace):
    return WorkspaceContext([workspace])


@pytest.fixture
def store(ctx):
    return BaselineStore(WorkspaceState(ctx))


@pytest.fixture
def sink():
    """Install sink that records calls instead of spawning processes."""
    return Mock()


@pytest.fixture
def make_session(ctx, store, sink):
    """Factory fixture for sessions with fast debounce and a mock sink."""
    def _make(**settings) -> Session:
        settings.setdefault("debounce_ms", 20)
        return Session(ctx, settings=Settings(**settings), store=store, sink=sink)
    return _make
