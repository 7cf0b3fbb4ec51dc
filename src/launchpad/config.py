"""Runtime settings: defaults, YAML file, environment overrides."""

import os
from pathlib import Path
from typing import Optional

try:
    import yaml
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "PyYAML is required for settings loading. Run: poetry install"
    ) from e
from pydantic import BaseModel, Field, field_validator

DEFAULT_SOURCES = ["codeforces", "codechef", "hackerearth", "kontests", "firecrawl"]


class SearchQuery(BaseModel):
    """One query sent to the scraping/search backend."""

    query: str
    label: str


DEFAULT_FIRECRAWL_QUERIES = [
    SearchQuery(query="upcoming hackathons registration open", label="Web Search"),
    SearchQuery(query="MLH hackathons students apply", label="MLH"),
    SearchQuery(query="Devpost hackathons online submissions open", label="Devpost"),
    SearchQuery(query="Devfolio hackathons India apply", label="Devfolio"),
    SearchQuery(query="Unstop hackathons competitions", label="Unstop"),
]


class Settings(BaseModel):
    """Aggregator settings."""

    db_path: Path = Path("launchpad.db")
    source_timeout: float = Field(default=8.0, gt=0, description="Seconds per live source")
    sources: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES))
    firecrawl_api_key: Optional[str] = None
    firecrawl_queries: list[SearchQuery] = Field(
        default_factory=lambda: [q.model_copy() for q in DEFAULT_FIRECRAWL_QUERIES]
    )
    fallback_path: Optional[Path] = None
    user_agent: str = "launchpad/0.1 (opportunity aggregator)"

    @field_validator("sources", mode="before")
    @classmethod
    def _split_sources(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return [str(s).strip().lower() for s in value if str(s).strip()]

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from YAML. Supports nested (sources/firecrawl) or flat structure."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        flat: dict = {}
        sources = data.get("sources")
        firecrawl = data.get("firecrawl", {}) or {}

        for key in ("db_path", "source_timeout", "fallback_path", "user_agent"):
            if data.get(key) is not None:
                flat[key] = data[key]

        if isinstance(sources, dict):
            if sources.get("enabled") is not None:
                flat["sources"] = sources["enabled"]
            if sources.get("timeout") is not None:
                flat["source_timeout"] = sources["timeout"]
        elif sources is not None:
            flat["sources"] = sources

        api_key = firecrawl.get("api_key", data.get("firecrawl_api_key"))
        if api_key:
            flat["firecrawl_api_key"] = api_key
        queries = firecrawl.get("queries", data.get("firecrawl_queries"))
        if queries:
            flat["firecrawl_queries"] = queries
        return cls.model_validate(flat)

    @classmethod
    def from_env(cls, base: Optional["Settings"] = None) -> "Settings":
        """Apply LAUNCHPAD_* and FIRECRAWL_API_KEY environment overrides on top of base."""
        settings = base or cls()
        updates: dict = {}
        if os.environ.get("LAUNCHPAD_DB_PATH"):
            updates["db_path"] = os.environ["LAUNCHPAD_DB_PATH"]
        if os.environ.get("LAUNCHPAD_SOURCE_TIMEOUT"):
            updates["source_timeout"] = os.environ["LAUNCHPAD_SOURCE_TIMEOUT"]
        if os.environ.get("LAUNCHPAD_SOURCES"):
            updates["sources"] = os.environ["LAUNCHPAD_SOURCES"]
        if os.environ.get("LAUNCHPAD_FALLBACK_PATH"):
            updates["fallback_path"] = os.environ["LAUNCHPAD_FALLBACK_PATH"]
        if os.environ.get("FIRECRAWL_API_KEY"):
            updates["firecrawl_api_key"] = os.environ["FIRECRAWL_API_KEY"]
        if not updates:
            return settings
        # Re-validate so string env values are coerced.
        return cls.model_validate({**settings.model_dump(), **updates})
