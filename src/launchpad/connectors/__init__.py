"""Live source connectors for opportunity aggregation."""

from launchpad.connectors.base import BaseConnector, SourceError, SourcePriority
from launchpad.connectors.registry import ConnectorRegistry

__all__ = ["BaseConnector", "ConnectorRegistry", "SourceError", "SourcePriority"]
