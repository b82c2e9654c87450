"""Video lookup interface used by workout enrichment."""
from __future__ import annotations

from typing import Optional
from urllib.parse import quote_plus

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
SEARCH_URL = "https://www.youtube.com/results?search_query={query}"


def search_results_url(query: str) -> str:
    """Link to a results page; used whenever no specific video was found."""
    return SEARCH_URL.format(query=quote_plus(query.strip() or "exercise tutorial"))


class VideoLookupService:
    """Base interface for video providers."""

    def find_video_url(self, query: str, category: str = "exercise", label: Optional[str] = None) -> Optional[str]:
        """Return a video URL for ``query``.

        ``category`` is ``exercise`` or ``diet``; ``label`` is the display
        name of the exercise or dish, used to reject unrelated videos.
        """
        raise NotImplementedError
