"""
Pytest configuration and shared fixtures.
"""

import pytest

from core.config import DiversificationConfig
from ranking_service.categories import get_all_categories
from tests.fixtures.sample_article import FIXED_NOW


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def categories():
    return get_all_categories()


@pytest.fixture
def default_config():
    return DiversificationConfig()


@pytest.fixture
def progressive_config():
    return DiversificationConfig(progressive_rescoring=True)
