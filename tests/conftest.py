"""
Global pytest configuration and fixtures for the wiki client tests.

This file contains shared fixtures and configurations that are available
to all test modules without explicit import.
"""

import os
import sys
from pathlib import Path
from typing import Dict, Generator

import pytest # type: ignore
from faker import Faker # type: ignore

# Add the project root to Python path
project_root: Path = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from azwiki.config.settings import reset_settings  # noqa: E402
from tests.fixtures.http_fixtures import (  # noqa: E402,F401
    data_source,
    make_data_source,
    token_config,
    wiki_server,
)

# Initialize Faker for generating test data
fake: Faker = Faker()


# ============================================================================
# Session-level fixtures
# ============================================================================


@pytest.fixture(scope="session")
def faker_instance() -> Faker:
    """
    Provide a Faker instance for generating test data.

    Returns:
        Configured Faker instance
    """
    return fake


# ============================================================================
# Function-level fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """
    Reset environment state before each test.
    This ensures tests don't interfere with each other.
    """
    # Store original environment
    original_env: Dict[str, str] = os.environ.copy()
    reset_settings()

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
    reset_settings()
