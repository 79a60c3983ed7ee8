"""
Pytest configuration and fixtures.
"""
import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from reel_analyzer.taxonomy import ActivityTaxonomy


@pytest.fixture
def taxonomy():
    return ActivityTaxonomy.from_names(["surfing", "yoga", "scuba diving", "wine tasting", "rock climbing"])
