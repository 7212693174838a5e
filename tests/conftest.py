"""Shared fixtures for azarchgen tests."""

import pytest

from azarchgen.catalog import ResourceCatalog, ResourceClassifier
from azarchgen.core.context import GenerationContext
from azarchgen.core.models import ArchitectureRequest
from azarchgen.topology import ArchitectureNormalizer, HierarchyBuilder


@pytest.fixture(scope="session")
def catalog():
    return ResourceCatalog.from_file()


@pytest.fixture
def classifier(catalog):
    return ResourceClassifier(catalog)


@pytest.fixture
def builder(catalog):
    return HierarchyBuilder(catalog)


@pytest.fixture
def context():
    return GenerationContext()


@pytest.fixture
def normalize(catalog):
    """Normalize a raw record with a fresh context; returns (architecture, context)."""

    def _normalize(data, config=None):
        ctx = GenerationContext()
        request = ArchitectureRequest.parse(data)
        architecture = ArchitectureNormalizer(catalog, config).normalize(request, ctx)
        return architecture, ctx

    return _normalize
