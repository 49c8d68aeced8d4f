"""Shared pytest fixtures for tinhorn tests.

Fixtures are organized by category:
- Encoder fixtures: in-memory output sinks
- Section fixtures: fake sections that record what they were rendered with
- Configuration fixtures: config dictionaries for the loader
"""

from typing import Any

import pytest

from tests.fixtures import FailingEncoder, RecordingSection
from tinhorn.encoding import StringEncoder

# =============================================================================
# Encoder Fixtures
# =============================================================================


@pytest.fixture
def encoder() -> StringEncoder:
    """Return an empty in-memory encoder."""
    return StringEncoder()


@pytest.fixture
def failing_encoder() -> FailingEncoder:
    """Return an encoder whose first write fails."""
    return FailingEncoder()


# =============================================================================
# Section Fixtures
# =============================================================================


@pytest.fixture
def section() -> RecordingSection:
    """Return a recording section with a visible body."""
    return RecordingSection(body="[body]")


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Return a minimal valid tinhorn configuration."""
    return {
        "output": {
            "encoding": "utf-8",
        }
    }


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a complete tinhorn configuration with all options."""
    return {
        "output": {
            "path": "build/index.html",
            "encoding": "utf-8",
        },
        "markdown": {
            "extensions": ["tables", "fenced_code"],
        },
    }
