"""Containment tree construction."""

from .hierarchy_builder import HierarchyBuilder, expanded_names, region_code
from .normalizer import ArchitectureNormalizer

__all__ = ["ArchitectureNormalizer", "HierarchyBuilder", "expanded_names", "region_code"]
