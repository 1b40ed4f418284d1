"""
Route table: URL -> {HttpMethod -> Destination}.

Invariants:
- Storing under ALL leaves ALL as the URL's only entry.
- Storing under a specific method never disturbs the URL's other entries.
- A lookup falls back to the ALL entry when no specific entry exists.
- Removing a specific method from a URL served under ALL leaves the other
  specific methods served by the same destination.
- Iteration is lexicographic by URL and skips URLs without entries.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from .destinations import Destination
from .methods import HttpMethod

logger = logging.getLogger("warmap.routing")


class RouteTable:
    """Mutable mapping of URLs to per-method destinations."""

    def __init__(self):
        self._routes: Dict[str, Dict[HttpMethod, Destination]] = {}

    def put(self, url: str, destination: Destination, method: HttpMethod = HttpMethod.ALL) -> None:
        """
        Register a destination for a URL.

        Args:
            url: URL pattern
            destination: What serves the URL
            method: HttpMethod.ALL replaces every entry of the URL
        """
        entries = self._routes.setdefault(url, {})
        if method is HttpMethod.ALL:
            entries.clear()
        entries[method] = destination
        logger.debug(f"Route {url} [{method.value}] -> {destination}")

    def put_all(self, url: str, mapping: Mapping[HttpMethod, Destination]) -> None:
        """Replace the whole method table of a URL."""
        self._routes[url] = dict(mapping)

    def get(self, url: str, method: HttpMethod) -> Optional[Destination]:
        """Specific entry for the method, else the ALL entry, else None."""
        entries = self._routes.get(url)
        if not entries:
            return None
        if method in entries:
            return entries[method]
        return entries.get(HttpMethod.ALL)

    def methods(self, url: str) -> Mapping[HttpMethod, Destination]:
        """Read-only copy of a URL's method table."""
        return MappingProxyType(dict(self._routes.get(url, {})))

    def remove(self, url: str, method: HttpMethod = HttpMethod.ALL) -> None:
        """
        Remove a URL's entry for one method.

        Removing ALL drops only the ALL entry. Removing a specific method
        from a URL carrying an ALL entry first expands ALL into one entry
        per specific method.
        """
        entries = self._routes.get(url)
        if entries is None:
            return
        if method is HttpMethod.ALL:
            entries.pop(HttpMethod.ALL, None)
            return
        fallback = entries.pop(HttpMethod.ALL, None)
        if fallback is not None:
            for specific in HttpMethod.specific():
                entries.setdefault(specific, fallback)
        entries.pop(method, None)

    def __contains__(self, url: object) -> bool:
        return bool(self._routes.get(url))  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(url for url, entries in self._routes.items() if entries))

    def __len__(self) -> int:
        return sum(1 for entries in self._routes.values() if entries)

    def __repr__(self) -> str:
        return f"RouteTable(urls={len(self)})"
