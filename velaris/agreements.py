"""
Project agreement form handling: turn raw form fields into a submission
payload and report which required answers are missing.
"""

from __future__ import annotations

from typing import Mapping

TEXT_FIELDS = ("client_name", "company_name", "email", "whatsapp", "signature_name")
CONSENT_FIELDS = ("agreed_payment_terms", "understood_scope_change_impact", "approved_proceed")

REQUIRED_MESSAGES = {
    "client_name": "Client name is required.",
    "company_name": "Company name is required.",
    "email": "Email is required.",
    "whatsapp": "WhatsApp number is required.",
    "agreed_payment_terms": "You must agree before proceeding.",
    "signature_name": "Full name is required as a signature.",
    "approved_proceed": "Please enable approval to proceed.",
}


def build_agreement_payload(form: Mapping[str, str], today: str) -> dict:
    """
    Normalize submitted form fields.

    Strings are trimmed, a blank project name becomes ``None``, a consent
    checkbox counts as given when any non-empty value was posted, and a blank
    signed date falls back to *today* (``YYYY-MM-DD``).
    """
    payload: dict = {name: str(form.get(name) or "").strip() for name in TEXT_FIELDS}
    payload["project_name"] = str(form.get("project_name") or "").strip() or None
    for name in CONSENT_FIELDS:
        payload[name] = bool(form.get(name))
    payload["signed_date"] = str(form.get("signed_date") or "").strip() or today
    return payload


def validate_agreement_payload(payload: Mapping) -> dict[str, str]:
    """Map each missing required field to its error message; empty when valid."""
    return {
        name: message
        for name, message in REQUIRED_MESSAGES.items()
        if not payload.get(name)
    }
