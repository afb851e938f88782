"""
pytest configuration and fixtures for the qualifier decoder tests.

Provides reusable fixtures for:
- Shared decoder instance
- Vector file locations
- Hypothesis property-based testing configuration
"""

import os
import sys
from pathlib import Path

import pytest
from hypothesis import settings, Verbosity, Phase

# Add project paths
sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

VECTORS_DIR = Path(__file__).parent / "vectors"

# Default profile: balanced speed and coverage
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
)

# CI profile: more thorough testing
settings.register_profile(
    "ci",
    max_examples=500,
    deadline=None,
    suppress_health_check=[],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)

# Dev profile: fast iteration
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
)

# Debug profile: verbose output
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


@pytest.fixture
def decoder():
    """Decoder with the canonical qualifier order."""
    from qualifier_parser import DescriptorDecoder
    return DescriptorDecoder()


@pytest.fixture
def vectors_dir():
    return VECTORS_DIR


# Markers for test categorization
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "compliance: marks tests that pin the binary record layout"
    )
