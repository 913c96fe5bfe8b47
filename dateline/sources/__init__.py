"""Backend clients: search/contents and encyclopedia snapshots."""

from dateline.sources.encyclopedia_client import EncyclopediaClient
from dateline.sources.search_client import SearchClient

__all__ = ["EncyclopediaClient", "SearchClient"]
