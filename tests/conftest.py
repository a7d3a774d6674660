"""Shared test fixtures."""

import os

import pytest


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Run without inherited build variables or a .env file."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith(("NATIVEDEPS_", "CARGO_CFG_")) or name in (
            "PROFILE",
            "OUT_DIR",
        ):
            monkeypatch.delenv(name, raising=False)
