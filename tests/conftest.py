"""
Shared pytest fixtures and configuration for mongoconf tests.

This module provides fresh (unfrozen) registries, a scrubbed environment
so host variables never leak into resolution, and a Typer CLI runner.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict

import pytest

# Put `src/` first so `import mongoconf` uses workspace code.
_REPO_ROOT = Path(__file__).resolve().parent.parent
if str(_REPO_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT / "src"))

from mongoconf.core.config.schema import (  # noqa: E402
    build_input_registry,
    build_output_registry,
    build_shared_registry,
)
from mongoconf.core.utils import logger as logger_module  # noqa: E402


# ============================================================================
# Registry Fixtures
# ============================================================================

@pytest.fixture
def shared_registry():
    """A freshly built shared registry, not yet frozen."""
    return build_shared_registry()


@pytest.fixture
def input_registry(shared_registry):
    """A freshly built input registry inheriting from ``shared_registry``."""
    return build_input_registry(shared_registry)


@pytest.fixture
def output_registry(shared_registry):
    """A freshly built output registry inheriting from ``shared_registry``."""
    return build_output_registry(shared_registry)


@pytest.fixture
def required_options() -> Dict[str, str]:
    """The smallest option set that satisfies every required input property."""
    return {
        "spark.mongodb.input.database": "test",
        "spark.mongodb.input.collection": "coll",
    }


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove connector and mongoconf variables from the process environment."""
    for key in list(os.environ.keys()):
        if key.startswith(("SPARK_MONGODB_", "MONGOCONF_")):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    """Start every test without a configured mongoconf logger."""
    monkeypatch.setattr(logger_module, "_logger", None)
    yield
    for handler in list(logging.getLogger("mongoconf").handlers):
        handler.close()
        logging.getLogger("mongoconf").removeHandler(handler)


# ============================================================================
# CLI Fixtures
# ============================================================================

@pytest.fixture
def cli_runner():
    """Typer test runner for the mongoconf CLI."""
    from typer.testing import CliRunner

    return CliRunner()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual functions/classes")
    config.addinivalue_line("markers", "integration: Tests that exercise several layers together")
