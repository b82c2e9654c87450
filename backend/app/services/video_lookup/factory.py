"""Video lookup provider factory."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from app.core.config import settings
from app.services.video_lookup.base import VideoLookupService
from app.services.video_lookup.youtube import YoutubeVideoLookup

logger = logging.getLogger(__name__)


@lru_cache
def get_video_lookup_service() -> Optional[VideoLookupService]:
    """Configured provider, or None when video enrichment is switched off."""
    provider = settings.video_lookup_provider.lower()
    if provider == "youtube":
        return YoutubeVideoLookup()
    if provider not in ("none", "off", "disabled"):
        logger.warning("Unknown video lookup provider %r; video enrichment disabled", provider)
    return None
