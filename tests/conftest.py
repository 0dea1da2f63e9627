"""Pytest configuration and shared fixtures."""

import pytest

from app.config import Settings
from factories import make_article, make_experience


@pytest.fixture
def test_settings():
    """Settings with defaults and no external configuration."""
    return Settings(
        _env_file=None,
        optimizely_graph_single_key="test-single-key",
        result_cache_ttl=0,
    )


@pytest.fixture
def scenario_articles():
    """Five articles scored 10, 8, 6, 4, 2."""
    return [make_article(f"a{score}", score=float(score)) for score in (10, 8, 6, 4, 2)]


@pytest.fixture
def scenario_experiences():
    """Three experiences scored 9, 7, 5."""
    return [make_experience(f"e{score}", score=float(score)) for score in (9, 7, 5)]
