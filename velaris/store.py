"""
In-memory content store for portfolio items and agreement submissions.

State is process-local and lost on restart. The portfolio store is seeded
with showcase entries on first access so the public site is never empty.
"""

from __future__ import annotations

import datetime as dt
import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Optional

from velaris.config import MAX_PORTFOLIO_TAGS, PORTFOLIO_CATEGORIES, PORTFOLIO_STATUSES

logger = logging.getLogger(__name__)


@dataclass
class PortfolioItem:
    id: str
    title: str
    description: str
    category: str
    status: str
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    is_published: bool = False
    created_at: dt.datetime = field(default_factory=lambda: _utcnow())
    updated_at: dt.datetime = field(default_factory=lambda: _utcnow())


@dataclass
class AgreementSubmission:
    id: str
    client_name: str
    company_name: str
    email: str
    whatsapp: str
    project_name: Optional[str]
    agreed_payment_terms: bool
    understood_scope_change_impact: bool
    signature_name: str
    approved_proceed: bool
    signed_date: str        # YYYY-MM-DD
    created_at: dt.datetime = field(default_factory=lambda: _utcnow())


_PORTFOLIO: list[PortfolioItem] = []
_AGREEMENTS: list[AgreementSubmission] = []
_SEEDED = False

_KEEP = object()


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def reset_store(seed: bool = True) -> None:
    """Drop all stored records. With ``seed=False`` the portfolio stays empty."""
    global _SEEDED
    _PORTFOLIO.clear()
    _AGREEMENTS.clear()
    _SEEDED = not seed


# --------------------------------------------------------------------------- #
# Validation helpers
# --------------------------------------------------------------------------- #
def _coerce_choice(value: str, choices: tuple[str, ...], what: str) -> str:
    normalized = str(value or "").strip().upper().replace(" ", "_")
    if normalized not in choices:
        raise ValueError(f"Invalid portfolio {what}")
    return normalized


def coerce_category(value: str) -> str:
    return _coerce_choice(value, PORTFOLIO_CATEGORIES, "category")


def coerce_status(value: str) -> str:
    return _coerce_choice(value, PORTFOLIO_STATUSES, "status")


def clean_tags(tags) -> list[str]:
    return [t for t in (tags or []) if t][:MAX_PORTFOLIO_TAGS]


# --------------------------------------------------------------------------- #
# Portfolio
# --------------------------------------------------------------------------- #
_SEED_ITEMS = [
    # (id, title, description, video, category, tags, status, age in days)
    ("seed-bps", "BPS Insights Dashboard",
     "A calm, metrics-first dashboard built for executive visibility and fast decisions.",
     "/BPS.mp4", "DASHBOARD", ["Dashboard", "Analytics", "KPI"], "LIVE", 18),
    ("seed-market", "Market Performance Analytics",
     "A reporting workspace that connects pipeline, revenue, and customer health into one view.",
     "/Market.mp4", "ANALYTICS", ["Analytics", "BI", "Reporting"], "LIVE", 14),
    ("seed-aftersales", "Aftersales CRM Workspace",
     "A CRM flow that keeps support, follow-ups, and renewals organized and measurable.",
     "/aftersales.mp4", "CRM", ["CRM", "Operations"], "LIVE", 11),
    ("seed-geomapping", "Geo Mapping Intelligence",
     "A location-aware view for planning territory coverage and field execution.",
     "/geomapping.mp4", "ANALYTICS", ["Geo", "Mapping", "Planning"], "PROTOTYPE", 9),
    ("seed-kpi", "KPI Monitoring Suite",
     "A lightweight KPI monitor with quick drilldowns and a clean signal-to-noise ratio.",
     "/kpi.mp4", "DASHBOARD", ["KPI", "Monitoring"], "LIVE", 7),
    ("seed-mayung", "Web App Delivery Preview",
     "A polished frontend flow focused on speed, clarity, and high-quality interactions.",
     "/mayung.mp4", "WEB_APP", ["Web App", "UI"], "INTERNAL", 4),
]


def _ensure_seeded() -> None:
    global _SEEDED
    if _SEEDED:
        return
    _SEEDED = True
    if _PORTFOLIO:
        return

    now = _utcnow()
    for sid, title, desc, video, category, tags, status, age_days in _SEED_ITEMS:
        created = now - dt.timedelta(days=age_days)
        _PORTFOLIO.append(PortfolioItem(
            id=sid,
            title=title,
            description=desc,
            category=category,
            status=status,
            video_url=video,
            tags=list(tags),
            is_published=True,
            created_at=created,
            updated_at=created,
        ))
    logger.info("Seeded portfolio store with %d items", len(_SEED_ITEMS))


def _newest_first(items):
    return sorted(items, key=lambda item: item.created_at, reverse=True)


def list_all_portfolio_items() -> list[PortfolioItem]:
    _ensure_seeded()
    return _newest_first(_PORTFOLIO)


def list_published_portfolio_items() -> list[PortfolioItem]:
    _ensure_seeded()
    return _newest_first(item for item in _PORTFOLIO if item.is_published)


def get_portfolio_item(item_id: str) -> Optional[PortfolioItem]:
    _ensure_seeded()
    return next((item for item in _PORTFOLIO if item.id == item_id), None)


def create_portfolio_item(
    title: str,
    description: str,
    category: str,
    tags: Optional[list[str]] = None,
    status: Optional[str] = None,
    thumbnail_url: Optional[str] = None,
    video_url: Optional[str] = None,
    is_published: bool = False,
) -> PortfolioItem:
    """Validate and insert a new portfolio item at the front of the store.

    Raises ``ValueError`` for an unknown category or status.
    """
    _ensure_seeded()
    now = _utcnow()
    item = PortfolioItem(
        id=str(uuid.uuid4()),
        title=title,
        description=description,
        category=coerce_category(category),
        status=coerce_status(status or "LIVE"),
        thumbnail_url=thumbnail_url or None,
        video_url=video_url or None,
        tags=clean_tags(tags),
        is_published=bool(is_published),
        created_at=now,
        updated_at=now,
    )
    _PORTFOLIO.insert(0, item)
    logger.info("Created portfolio item %s (%s)", item.id, item.title)
    return item


def update_portfolio_item(
    item_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    category: Optional[str] = None,
    tags: Optional[list[str]] = None,
    status: Optional[str] = None,
    thumbnail_url=_KEEP,
    video_url=_KEEP,
    is_published: Optional[bool] = None,
) -> PortfolioItem:
    """
    Apply a partial update.

    ``None`` keeps the current value for plain fields. The media URLs keep
    their value when omitted and are cleared when passed ``None``.
    Raises ``LookupError`` if the item does not exist.
    """
    _ensure_seeded()
    idx = next((i for i, item in enumerate(_PORTFOLIO) if item.id == item_id), None)
    if idx is None:
        raise LookupError("Portfolio item not found")

    prev = _PORTFOLIO[idx]
    updated = replace(
        prev,
        title=title if title is not None else prev.title,
        description=description if description is not None else prev.description,
        category=coerce_category(category) if category else prev.category,
        status=coerce_status(status) if status else prev.status,
        tags=clean_tags(tags) if tags is not None else prev.tags,
        thumbnail_url=prev.thumbnail_url if thumbnail_url is _KEEP else (thumbnail_url or None),
        video_url=prev.video_url if video_url is _KEEP else (video_url or None),
        is_published=prev.is_published if is_published is None else bool(is_published),
        updated_at=_utcnow(),
    )
    _PORTFOLIO[idx] = updated
    logger.info("Updated portfolio item %s", item_id)
    return updated


def delete_portfolio_item(item_id: str) -> None:
    _ensure_seeded()
    _PORTFOLIO[:] = [item for item in _PORTFOLIO if item.id != item_id]
    logger.info("Deleted portfolio item %s", item_id)


# --------------------------------------------------------------------------- #
# Agreement submissions
# --------------------------------------------------------------------------- #
def list_agreement_submissions() -> list[AgreementSubmission]:
    return _newest_first(_AGREEMENTS)


def get_agreement_submission(submission_id: str) -> Optional[AgreementSubmission]:
    return next((s for s in _AGREEMENTS if s.id == submission_id), None)


def create_agreement_submission(
    client_name: str,
    company_name: str,
    email: str,
    whatsapp: str,
    project_name: Optional[str],
    agreed_payment_terms: bool,
    understood_scope_change_impact: bool,
    signature_name: str,
    approved_proceed: bool,
    signed_date: str,
) -> AgreementSubmission:
    submission = AgreementSubmission(
        id=str(uuid.uuid4()),
        client_name=client_name,
        company_name=company_name,
        email=email,
        whatsapp=whatsapp,
        project_name=project_name or None,
        agreed_payment_terms=agreed_payment_terms,
        understood_scope_change_impact=understood_scope_change_impact,
        signature_name=signature_name,
        approved_proceed=approved_proceed,
        signed_date=signed_date,
    )
    _AGREEMENTS.insert(0, submission)
    logger.info("Stored agreement submission %s from %s", submission.id, client_name)
    return submission
