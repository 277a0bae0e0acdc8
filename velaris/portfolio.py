"""
Portfolio browsing: tag parsing, category filter, keyword search and
video embed detection for the public showcase.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional
from urllib.parse import parse_qs, urlparse

from velaris.config import MAX_PORTFOLIO_TAGS
from velaris.store import PortfolioItem

ALL_CATEGORIES = "All"
VIDEO_FILE_EXTS = (".mp4", ".webm", ".ogg")

_YOUTUBE_HOSTS = {"youtube.com", "m.youtube.com", "youtube-nocookie.com"}
_VIMEO_HOSTS = {"vimeo.com", "player.vimeo.com"}


def parse_tags(raw: str) -> list[str]:
    """Split a comma-separated tag field into at most 32 trimmed tags."""
    tags = [t.strip() for t in (raw or "").split(",")]
    return [t for t in tags if t][:MAX_PORTFOLIO_TAGS]


def portfolio_categories(items: Iterable[PortfolioItem]) -> list[str]:
    return [ALL_CATEGORIES, *sorted({item.category for item in items})]


def filter_portfolio_items(
    items: Iterable[PortfolioItem],
    query: str = "",
    category: str = ALL_CATEGORIES,
) -> list[PortfolioItem]:
    """
    Keep items in *category* whose text matches *query*.

    The search is a case-insensitive substring match over title, description,
    category, status and tags. An empty query matches everything.
    """
    q = (query or "").strip().lower()
    category = category or ALL_CATEGORIES
    out: list[PortfolioItem] = []
    for item in items:
        if category != ALL_CATEGORIES and item.category != category:
            continue
        if q:
            haystack = " ".join([
                item.title,
                item.description,
                item.category,
                item.status,
                " ".join(item.tags),
            ]).lower()
            if q not in haystack:
                continue
        out.append(item)
    return out


# --------------------------------------------------------------------------- #
# Media
# --------------------------------------------------------------------------- #
def normalize_public_url(raw: Optional[str]) -> str:
    """Turn a stored media path into something a browser can request."""
    trimmed = (raw or "").strip()
    if not trimmed:
        return ""
    if re.match(r"^https?://", trimmed, re.IGNORECASE):
        return trimmed
    if trimmed.startswith("public/"):
        return "/" + trimmed[len("public/"):]
    if trimmed.startswith("/"):
        return trimmed
    return "/" + trimmed


def _host(url) -> str:
    return (url.hostname or "").removeprefix("www.")


def youtube_id(raw: str) -> Optional[str]:
    url = urlparse(raw)
    host = _host(url)
    parts = [p for p in url.path.split("/") if p]
    if host == "youtu.be":
        return parts[0] if parts else None
    if host not in _YOUTUBE_HOSTS:
        return None
    if url.path == "/watch":
        return parse_qs(url.query).get("v", [None])[0]
    for marker in ("embed", "shorts"):
        if marker in parts:
            idx = parts.index(marker)
            return parts[idx + 1] if idx + 1 < len(parts) else None
    return None


def vimeo_id(raw: str) -> Optional[str]:
    url = urlparse(raw)
    if _host(url) not in _VIMEO_HOSTS:
        return None
    return next((p for p in url.path.split("/") if p.isdigit()), None)


def is_direct_video_url(raw: str) -> bool:
    path = urlparse(raw).path.lower()
    return path.endswith(VIDEO_FILE_EXTS)


def video_embed(raw: Optional[str]) -> Optional[dict]:
    """Describe how to embed *raw*: ``{"kind": ..., "src": ...}`` or None."""
    url = normalize_public_url(raw)
    if not url:
        return None
    yt = youtube_id(url)
    if yt:
        return {"kind": "youtube", "src": f"https://www.youtube-nocookie.com/embed/{yt}"}
    vm = vimeo_id(url)
    if vm:
        return {"kind": "vimeo", "src": f"https://player.vimeo.com/video/{vm}"}
    if is_direct_video_url(url):
        return {"kind": "file", "src": url}
    return None


def serialize_portfolio_item(item: PortfolioItem) -> dict:
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "thumbnail_url": normalize_public_url(item.thumbnail_url) or None,
        "video_url": item.video_url,
        "video": video_embed(item.video_url),
        "category": item.category,
        "tags": list(item.tags),
        "status": item.status,
        "is_published": item.is_published,
        "created_at": item.created_at.isoformat(),
        "updated_at": item.updated_at.isoformat(),
    }
