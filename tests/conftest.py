"""Shared fixtures for the mathast test suite."""

import pytest

from mathast import MathEngine, ScientificEngine
from mathast.registry import Registry, reset_default_registry


@pytest.fixture(autouse=True)
def fresh_default_registry():
    """Every test starts and ends with a newly created process-wide registry."""
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture
def registry() -> Registry:
    """A registry holding only the default constants."""
    return Registry()


@pytest.fixture
def scientific_registry() -> Registry:
    """A registry with the scientific functions installed (radians)."""
    return ScientificEngine.install(Registry(), degree_mode=False)


@pytest.fixture
def parse(registry):
    """Parse against the test's own registry."""
    def _parse(source):
        return MathEngine.parse_expression(source, registry)
    return _parse
