"""
Pytest configuration and shared fixtures.
"""

import os
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def dataflow_xml() -> str:
    """The SPC balance-of-payments dataflow with its DSD, concepts and codelists."""
    return (FIXTURES_DIR / "dataflow_df_bp50.xml").read_text(encoding="utf-8")


@pytest.fixture
def availability_xml() -> str:
    """An availability constraint for DF_BP50 with an observation count and a time range."""
    return (FIXTURES_DIR / "availability_df_bp50.xml").read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """
    An autouse fixture that removes package settings from the environment so
    that a developer's shell does not leak into the tests.
    """
    for name in list(os.environ):
        if name.startswith("PY_SDMX_SCHEMA_"):
            monkeypatch.delenv(name, raising=False)
