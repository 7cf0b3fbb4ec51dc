#!/usr/bin/env python3
"""Quick live check of each contest/hackathon source.

Run:
  poetry run python scripts/check_live_sources.py              # every registered source
  poetry run python scripts/check_live_sources.py codeforces   # one source
"""

import asyncio
import sys

import httpx

from launchpad.config import Settings
from launchpad.connectors.registry import ConnectorRegistry


async def check(source_ids: list[str], settings: Settings) -> int:
    failed = 0
    async with httpx.AsyncClient(timeout=settings.source_timeout, follow_redirects=True) as client:
        for source_id in source_ids:
            kwargs = {"client": client}
            if source_id == "firecrawl":
                if not settings.firecrawl_api_key:
                    print(f"  {source_id}: skipped (FIRECRAWL_API_KEY not set)")
                    continue
                kwargs["api_key"] = settings.firecrawl_api_key
            connector = ConnectorRegistry.get(source_id, **kwargs)
            try:
                opps = await connector.fetch_all()
            except Exception as e:
                failed += 1
                print(f"❌ {source_id}: {e}")
                continue
            print(f"✅ {source_id}: {len(opps)} opportunities")
            for i, o in enumerate(opps[:3], 1):
                print(f"  {i}. {o.title} ({o.deadline:%Y-%m-%d %H:%M %z})")
    return failed


def main() -> None:
    settings = Settings.from_env()
    source_ids = sys.argv[1:] or ConnectorRegistry.available_sources()
    failed = asyncio.run(check(source_ids, settings))
    if failed:
        print(f"\n⚠️ {failed} source(s) failed; the aggregator will fall back to curated data.")


if __name__ == "__main__":
    main()
