"""
Configuration constants for the Velaris Analytics site.

Static content and limits live here as module constants. Secrets and
deployment switches are read from the environment on every call so that a
freshly loaded ``.env`` (or a test's monkeypatch) is always honoured.
"""

from __future__ import annotations

import os

# --------------------------------------------------------------------------- #
# Brand
# --------------------------------------------------------------------------- #
BRAND_NAME = "Velaris Analytics"
BRAND_TAGLINE = "CRM Systems • Data Analytics"

# --------------------------------------------------------------------------- #
# Admin session
# --------------------------------------------------------------------------- #
ADMIN_SESSION_COOKIE_NAME = "velaris_admin"
ADMIN_SESSION_TTL_SECONDS = 60 * 60 * 24 * 7   # 7 days
SESSION_VERSION = 1

# --------------------------------------------------------------------------- #
# Portfolio CMS
# --------------------------------------------------------------------------- #
PORTFOLIO_CATEGORIES = (
    "CRM",
    "ANALYTICS",
    "AUTOMATION",
    "DASHBOARD",
    "WEB_APP",
    "INTERNAL_SYSTEM",
)
PORTFOLIO_STATUSES = ("LIVE", "INTERNAL", "PROTOTYPE")
MAX_PORTFOLIO_TAGS = 32

# --------------------------------------------------------------------------- #
# Landing page content
# --------------------------------------------------------------------------- #
SERVICES = [
    {
        "title": "CRM Systems",
        "description": "Custom CRM platforms designed for clarity, speed, and operational fit.",
    },
    {
        "title": "Data Analytics",
        "description": "Decision-grade metrics, insights, and tracking that teams actually use.",
    },
    {
        "title": "BI Dashboards",
        "description": "Power BI-style reporting experiences with premium usability and detail.",
    },
    {
        "title": "Automation",
        "description": "Reduce friction with reliable workflows, integrations, and smart ops.",
    },
]

PROCESS_STEPS = [
    {
        "title": "Discover",
        "description": "Clarify goals, audit data, map operations, and align on success metrics.",
    },
    {
        "title": "Design",
        "description": "Model the system, design the dashboard language, and prototype flows.",
    },
    {
        "title": "Build",
        "description": "Ship reliable CRM, analytics pipelines, and UI with tested integrations.",
    },
    {
        "title": "Optimize",
        "description": "Measure adoption, refine performance, and evolve automation over time.",
    },
]

# --------------------------------------------------------------------------- #
# Project agreement
# --------------------------------------------------------------------------- #
AGREEMENT_CLAUSES = [
    "Scope follows the approved proposal and agreed deliverables.",
    "Payment terms: 50% down payment before start, 50% before handover.",
    "Scope changes require an additional written agreement and may affect cost & timeline.",
    "Source code is delivered after full payment is completed.",
]
AGREEMENT_DOC_PREFIX = "AG-"
AGREEMENT_TEMPLATE_DOC_ID = "AG-TEMPLATE"
AGREEMENT_PDF_BASENAME = "Velaris-Project-Agreement"

# --------------------------------------------------------------------------- #
# Contact
# --------------------------------------------------------------------------- #
DEFAULT_WHATSAPP_NUMBER = "6285198466493"
WHATSAPP_BASE_URL = "https://wa.me/"


def admin_password() -> str:
    return os.environ.get("ADMIN_PASSWORD", "")


def session_secret() -> str:
    """Signing key for admin sessions, or an empty string when unconfigured.

    A dedicated ``ADMIN_SESSION_SECRET`` wins; otherwise the admin password
    doubles as the key.
    """
    return os.environ.get("ADMIN_SESSION_SECRET") or admin_password()


def is_production() -> bool:
    return os.environ.get("VELARIS_ENV", "development").lower() == "production"
