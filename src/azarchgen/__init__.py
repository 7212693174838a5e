"""Python azarchgen - Azure architecture diagram generation.

Turns a flat list of Azure resources into a nested, positioned draw.io
diagram: regions, subscriptions, resource groups, networks, subnets and
availability zones, with styled connections between them.
"""

__version__ = "1.0.0"

from .core.generator import ArchGen
from .core.errors import MalformedInputError
from .core.models import ConnectionStyle, GenerationConfig, WarningKind

__all__ = ["ArchGen", "ConnectionStyle", "GenerationConfig", "MalformedInputError", "WarningKind"]
