"""Registry for discovering and instantiating live source connectors."""

from typing import Type

from launchpad.connectors.base import BaseConnector
from launchpad.connectors.contests import (
    CodeChefConnector,
    CodeforcesConnector,
    HackerEarthConnector,
    KontestsConnector,
)
from launchpad.connectors.firecrawl import FirecrawlConnector


class ConnectorRegistry:
    """Live sources by id, listed in merge priority order."""

    _connectors: dict[str, Type[BaseConnector]] = {
        connector_cls.source_id: connector_cls
        for connector_cls in (
            CodeforcesConnector,
            CodeChefConnector,
            HackerEarthConnector,
            KontestsConnector,
            FirecrawlConnector,
        )
    }

    @classmethod
    def get_class(cls, source_id: str) -> Type[BaseConnector]:
        """Connector class for a source id; no client needed."""
        try:
            return cls._connectors[source_id.strip().lower()]
        except KeyError:
            raise ValueError(
                f"Unknown source: {source_id}. Available: {cls.available_sources()}"
            ) from None

    @classmethod
    def get(cls, source_id: str, **kwargs) -> BaseConnector:
        """Connector instance for a source id; kwargs go to the connector's __init__."""
        return cls.get_class(source_id)(**kwargs)

    @classmethod
    def available_sources(cls) -> list[str]:
        """Source ids, highest merge priority first."""
        return sorted(cls._connectors, key=lambda s: cls._connectors[s].priority)
