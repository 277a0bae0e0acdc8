"""WhatsApp contact links for calls to action."""

from __future__ import annotations

import os
import re
from typing import Optional
from urllib.parse import quote

from velaris.config import DEFAULT_WHATSAPP_NUMBER, WHATSAPP_BASE_URL


def whatsapp_href(message: Optional[str] = None) -> str:
    explicit = os.environ.get("WHATSAPP_LINK")
    if explicit:
        return explicit

    number = re.sub(r"\D", "", os.environ.get("WHATSAPP_NUMBER", DEFAULT_WHATSAPP_NUMBER))
    base = f"{WHATSAPP_BASE_URL}{number}"
    if not message:
        return base
    text = quote(message, safe="!~*'()")
    return f"{base}?text={text}"
