"""Main ArchGen class for generating Azure architecture diagrams."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..catalog import ResourceCatalog, ResourceClassifier
from ..topology import ArchitectureNormalizer, HierarchyBuilder
from ..visualization import ConnectionResolver, DrawIOGenerator, LayoutEngine
from .context import GenerationContext
from .models import (
    ArchitectureRequest,
    ConnectionStyle,
    GenerationConfig,
    GenerationResult,
    Node,
    NodeKind,
)

logger = logging.getLogger(__name__)

DRAWIO_EXTENSION = ".drawio"


class ArchGen:
    """Main class for turning architecture records into draw.io diagrams."""

    def __init__(
        self,
        catalog: Optional[ResourceCatalog] = None,
        catalog_path: Optional[Union[str, Path]] = None,
        config: Optional[GenerationConfig] = None,
    ):
        """Initialize ArchGen instance.

        Args:
            catalog: Resource catalog to use. Takes precedence over ``catalog_path``.
            catalog_path: JSON catalog file. If None, uses the bundled catalog.
            config: Generation settings. If None, uses defaults.
        """
        self.catalog = catalog or ResourceCatalog.from_file(catalog_path)
        self.config = config or GenerationConfig()
        self.classifier = ResourceClassifier(self.catalog)
        logger.info(f"ArchGen initialized with {len(self.catalog)} resource types")

    def _config_for(self, request: ArchitectureRequest, title: Optional[str]) -> GenerationConfig:
        chosen = title or request.title
        if chosen:
            return self.config.model_copy(update={"title": chosen})
        return self.config

    def generate(
        self,
        data: Union[ArchitectureRequest, Dict[str, Any], str, bytes],
        title: Optional[str] = None,
        modified: Optional[str] = None,
    ) -> GenerationResult:
        """Generate a draw.io document from an architecture record.

        Args:
            data: Parsed record, decoded JSON object or JSON text.
            title: Diagram title overriding the record's own title.
            modified: Timestamp for the document header. Defaults to now.

        Returns:
            The document plus the tree, registry and collected warnings.

        Raises:
            MalformedInputError: If the record is structurally invalid.
        """
        request = ArchitectureRequest.parse(data)
        config = self._config_for(request, title)
        context = GenerationContext()

        logger.info(f"Generating diagram for {len(request.resources)} resource entries")

        builder = HierarchyBuilder(self.catalog, self.classifier)
        architecture = ArchitectureNormalizer(self.catalog, config, builder).normalize(request, context)
        architecture.title = config.title

        layout = LayoutEngine(self.catalog, config).layout(architecture, context)
        connections = ConnectionResolver().resolve(architecture.connections, layout.registry, context)
        xml = DrawIOGenerator(self.catalog, modified=modified).generate(
            architecture, layout, connections, context
        )

        if context.warnings:
            logger.info(f"Generation finished with {len(context.warnings)} warnings")
        return GenerationResult(
            xml=xml,
            architecture=architecture,
            warnings=list(context.warnings),
            registry=layout.registry,
            connections=connections,
            page_width=layout.page_width,
            page_height=layout.page_height,
        )

    def export_diagram(
        self,
        data: Union[ArchitectureRequest, Dict[str, Any], str, bytes],
        output_file: Union[str, Path],
        title: Optional[str] = None,
    ) -> GenerationResult:
        """Generate a diagram and write it to a ``.drawio`` file.

        Args:
            data: Architecture record (see ``generate``).
            output_file: Output file path. ``.drawio`` is appended when the
                path has no extension.
            title: Diagram title.

        Returns:
            The generation result.

        Raises:
            ValueError: If the output file has a different extension.
        """
        output_path = Path(output_file)
        actual_extension = output_path.suffix.lower()
        if not actual_extension:
            output_path = output_path.with_suffix(DRAWIO_EXTENSION)
            logger.info(f"Added extension: {output_file} -> {output_path}")
        elif actual_extension != DRAWIO_EXTENSION:
            raise ValueError(
                f"Output file extension '{actual_extension}' is not supported. "
                f"Expected extension: '{DRAWIO_EXTENSION}'. "
                f"Please use '{output_path.stem}{DRAWIO_EXTENSION}'."
            )

        result = self.generate(data, title=title)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result.xml, encoding="utf-8")
        logger.info(f"Diagram exported successfully: {output_path}")
        result.output_path = output_path
        return result

    def preview_resources(self, data: Union[ArchitectureRequest, Dict[str, Any], str, bytes]) -> List[Node]:
        """Build the containment tree without laying it out or emitting XML.

        Args:
            data: Architecture record.

        Returns:
            Leaf resource nodes in document order.
        """
        request = ArchitectureRequest.parse(data)
        context = GenerationContext()
        builder = HierarchyBuilder(self.catalog, self.classifier)
        architecture = ArchitectureNormalizer(self.catalog, self.config, builder).normalize(
            request, context
        )
        return architecture.resources()

    def resolve_type(self, type_string: str) -> Optional[str]:
        """Classify a free-text resource type."""
        return self.classifier.classify(type_string)

    def get_supported_types(self) -> List[str]:
        """Get list of canonical resource types in the catalog."""
        return self.catalog.types()

    def get_supported_styles(self) -> List[str]:
        """Get list of supported connection styles."""
        return [style.value for style in ConnectionStyle]

    def get_container_levels(self) -> List[str]:
        """Get list of container levels that can appear in a diagram."""
        return [kind.value for kind in NodeKind if kind not in (NodeKind.RESOURCE, NodeKind.GLOBAL_RESOURCES)]

    def get_aliases(self) -> Dict[str, str]:
        """Get the alias table mapping free-text names to canonical types."""
        return dict(self.catalog.aliases)
