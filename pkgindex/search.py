"""Package search: listing + name filter + string_score ranking."""
from __future__ import annotations

from typing import List, Optional

from .index_client import PackageIndexClient, apply_filter
from .model import Package
from .scoring import RELEVANCE_THRESHOLD, rank


class SearchEngine:
    """Ranks the index listing against a query.

    Every call re-fetches the listing; nothing is cached between calls.
    """

    def __init__(
        self,
        client: PackageIndexClient,
        fuzziness: float = 0.0,
        threshold: float = RELEVANCE_THRESHOLD,
    ):
        self.client = client
        self.fuzziness = fuzziness
        self.threshold = threshold

    def list(self, pattern: Optional[str] = None) -> List[Package]:
        return apply_filter(pattern)(self.client.list_packages())

    def search(
        self,
        query: str,
        pattern: Optional[str] = None,
        fuzziness: Optional[float] = None,
    ) -> List[Package]:
        """Return packages matching query, best first.

        Args:
            query: Search text scored against package names
            pattern: Optional '*' glob the full name must match
            fuzziness: Overrides the engine default for this call
        """
        candidates = self.list(pattern)
        fz = self.fuzziness if fuzziness is None else fuzziness
        return rank(candidates, query, fuzziness=fz, threshold=self.threshold)
