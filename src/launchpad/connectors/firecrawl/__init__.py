"""Firecrawl web search connector."""

from .connector import FirecrawlConnector

__all__ = ["FirecrawlConnector"]
