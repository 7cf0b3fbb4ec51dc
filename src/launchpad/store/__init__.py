"""Local storage for curated opportunities."""

from launchpad.store.sqlite_store import OpportunityStore

__all__ = ["OpportunityStore"]
