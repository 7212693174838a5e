"""Layout and draw.io emission."""

from .connection_resolver import ConnectionResolver
from .drawio_generator import DrawIOGenerator
from .layout_engine import LayoutEngine

__all__ = ["ConnectionResolver", "DrawIOGenerator", "LayoutEngine"]
