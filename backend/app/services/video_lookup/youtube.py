"""YouTube Data API video lookup."""
from __future__ import annotations

import logging
import re
from collections import OrderedDict
from threading import Lock
from typing import Any, Dict, Optional, Tuple

import httpx

from app.core.config import Settings, settings as app_settings
from app.services.video_lookup.base import WATCH_URL, VideoLookupService, search_results_url

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEYS = frozenset({"YOUR_YOUTUBE_API_KEY", "your-youtube-api-key"})

EXERCISE_KEYWORDS = (
    "tutorial",
    "proper form",
    "how to",
    "exercise",
    "workout",
    "training",
    "form check",
    "technique",
    "beginner",
    "guide",
)
DIET_KEYWORDS = (
    "recipe",
    "how to make",
    "cooking",
    "healthy",
    "meal prep",
    "nutrition",
    "step by step",
    "easy recipe",
)
EXCLUDED_KEYWORDS = (
    "music",
    "song",
    "game",
    "news",
    "movie",
    "trailer",
    "comedy",
    "funny",
    "prank",
    "challenge",
    "dance",
    "k-pop",
    "mv",
)

# (fragments found in the exercise name, terms that must then appear in the video text)
SIMILAR_TERMS = (
    (("로우", "row"), ("row",)),
    (("스쿼트", "squat"), ("squat",)),
    (("프레스", "press"), ("press",)),
    (("랫풀다운", "랫풀", "pulldown"), ("pulldown", "pull down", "lat pulldown")),
    (("풀업", "pull"), ("pull",)),
    (("크런치", "crunch"), ("crunch",)),
    (("플랭크", "plank"), ("plank",)),
    (("런지", "lunge"), ("lunge",)),
    (("데드리프트", "deadlift"), ("deadlift",)),
    (("푸시업", "푸쉬업", "push"), ("push",)),
    (("덤벨", "dumbbell"), ("dumbbell", "dumb bell")),
    (("바벨", "barbell"), ("barbell", "bar bell")),
    (("숄더", "shoulder"), ("shoulder",)),
    (("레터럴", "lateral"), ("lateral",)),
    (("레이즈", "raise"), ("raise",)),
    (("컬", "curl"), ("curl",)),
    (("익스텐션", "extension"), ("extension",)),
    (("마운틴", "mountain"), ("mountain",)),
    (("클라이머", "climber"), ("climber",)),
    (("버피", "burpee"), ("burpee",)),
    (("점프", "jump"), ("jump",)),
    (("러닝", "running"), ("running", "run")),
    (("걷기", "walking"), ("walking", "walk")),
)

_HANGUL = re.compile(r"[ㄱ-ㅎㅏ-ㅣ가-힣]")


def is_korean(text: str) -> bool:
    return bool(_HANGUL.search(text or ""))


def _similar_word_present(text: str, word: str) -> bool:
    for fragments, terms in SIMILAR_TERMS:
        if any(fragment in word for fragment in fragments):
            return any(term in text for term in terms)
    return False


def _matches_exercise_name(text: str, name: str) -> bool:
    lowered = name.lower().strip()
    if lowered in text:
        return True
    words = lowered.split()
    matched = sum(1 for word in words if len(word) >= 2 and (word in text or _similar_word_present(text, word)))
    if matched >= max(1, len(words) // 2):
        return True
    if not is_korean(lowered):
        return any(len(word) >= 3 and word in text for word in words)
    return False


def is_relevant(title: Optional[str], description: Optional[str], label: Optional[str], category: str) -> bool:
    """Decide whether a search hit is an instructional video for ``label``."""
    text = f"{(title or '').lower()} {(description or '').lower()}"
    keywords = EXERCISE_KEYWORDS if category == "exercise" else DIET_KEYWORDS
    if not any(keyword in text for keyword in keywords):
        return False
    if category == "exercise" and label and label.strip() and not _matches_exercise_name(text, label):
        return False
    return not any(keyword in text for keyword in EXCLUDED_KEYWORDS)


class YoutubeVideoLookup(VideoLookupService):
    """Search the YouTube Data API and return the first relevant short video.

    Falls back to a search-results link when the key is missing, the call
    fails or nothing relevant comes back. Only resolved watch URLs are cached.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        config: Optional[Settings] = None,
    ) -> None:
        config = config or app_settings
        self.api_key = (api_key if api_key is not None else config.youtube_api_key) or ""
        self.api_url = config.youtube_api_url
        self._http = http_client or httpx.Client(timeout=config.youtube_timeout_seconds)
        self._cache: "OrderedDict[Tuple[str, str, str], str]" = OrderedDict()
        self._cache_size = config.video_cache_size
        self._lock = Lock()

    def is_api_key_valid(self) -> bool:
        key = self.api_key.strip()
        return bool(key) and key not in PLACEHOLDER_API_KEYS

    def find_video_url(self, query: str, category: str = "exercise", label: Optional[str] = None) -> Optional[str]:
        if not query or not query.strip():
            return None
        query = query.strip()
        if not self.is_api_key_valid():
            logger.warning("YouTube API key not configured; returning search link for %r", query)
            return search_results_url(query)

        cache_key = (query, category, label or "")
        with self._lock:
            cached = self._cache.get(cache_key)
            if cached:
                self._cache.move_to_end(cache_key)
                return cached

        url = self._search(query, category, label)
        if url:
            with self._lock:
                self._cache[cache_key] = url
                while len(self._cache) > self._cache_size:
                    self._cache.popitem(last=False)
            return url
        return search_results_url(query)

    def _search(self, query: str, category: str, label: Optional[str]) -> Optional[str]:
        params: Dict[str, Any] = {
            "part": "snippet",
            "type": "video",
            "maxResults": 5,
            "videoEmbeddable": "true",
            "videoSyndicated": "true",
            "videoDuration": "short",
            "safeSearch": "strict",
            "order": "relevance",
            "relevanceLanguage": "ko" if is_korean(query) else "en",
            "q": query,
            "key": self.api_key,
        }
        logger.info("YouTube search: query=%r label=%r", query, label)
        try:
            response = self._http.get(self.api_url, params=params)
            response.raise_for_status()
            items = response.json().get("items") or []
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("YouTube search failed for %r: %s", query, exc)
            return None

        for item in items:
            snippet = item.get("snippet") or {}
            video_id = (item.get("id") or {}).get("videoId")
            if not video_id:
                continue
            if is_relevant(snippet.get("title"), snippet.get("description"), label, category):
                url = WATCH_URL.format(video_id=video_id)
                logger.info("YouTube video found for %r: %s", label or query, url)
                return url
            logger.debug("Skipping unrelated video %r", snippet.get("title"))

        logger.warning("No relevant YouTube video for %r (label=%r)", query, label)
        return None
