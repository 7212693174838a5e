"""Match symbolic connection endpoints to laid-out cells."""

import logging
from typing import List, Mapping, Optional, Sequence

from ..core.context import GenerationContext
from ..core.models import Connection, RegistryEntry, ResolvedConnection, WarningKind

logger = logging.getLogger(__name__)


class ConnectionResolver:
    """Resolves endpoint names against the layout registry.

    Matching precedence, first hit wins:

    1. exact name
    2. case-insensitive name
    3. substring in either direction, in registry insertion order
    """

    def find(self, name: str, registry: Mapping[str, RegistryEntry]) -> Optional[RegistryEntry]:
        """Look up one endpoint name."""
        if not name:
            return None
        if name in registry:
            return registry[name]

        lowered = name.lower()
        for key, entry in registry.items():
            if key.lower() == lowered:
                return entry

        for key, entry in registry.items():
            key_lower = key.lower()
            if lowered in key_lower or key_lower in lowered:
                return entry
        return None

    def resolve(
        self,
        connections: Sequence[Connection],
        registry: Mapping[str, RegistryEntry],
        context: GenerationContext,
    ) -> List[ResolvedConnection]:
        """Resolve every connection, dropping those with a missing endpoint.

        Args:
            connections: Declared and synthesized connections.
            registry: Name index built by the layout pass.
            context: Per-run context collecting warnings.

        Returns:
            Connections whose endpoints were both found, in input order.
        """
        resolved = []
        for connection in connections:
            source = self.find(connection.source, registry)
            target = self.find(connection.target, registry)
            if source is None or target is None:
                missing = connection.source if source is None else connection.target
                context.warn(
                    WarningKind.UNRESOLVED_CONNECTION_ENDPOINT,
                    f"Dropping connection {connection.source} -> {connection.target}: "
                    f"'{missing}' not found",
                )
                continue
            resolved.append(
                ResolvedConnection(
                    connection=connection,
                    source_id=source.cell_id,
                    target_id=target.cell_id,
                )
            )
        logger.info(f"Resolved {len(resolved)} of {len(connections)} connections")
        return resolved
