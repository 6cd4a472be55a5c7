"""
Text search helpers for leads and users.

Matching is done in memory: both sides are normalised (Turkish-aware
lower-casing, punctuation stripped, whitespace removed) and compared by
substring containment. Phone numbers are compared on digits only.
"""

import re
from typing import Iterable, Optional

from ..models.lead import Lead


_TURKISH_LOWER = str.maketrans({"I": "ı", "İ": "i"})
_NON_WORD = re.compile(r"[^a-z0-9ğüşöçı\s]")
_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"\D")


def normalize(text: Optional[str]) -> str:
    """
    Normalise text for comparison.

    >>> normalize("  Ayşe-Nur  İPEK ")
    'ayşenuripek'
    """
    if not text:
        return ""
    lowered = text.translate(_TURKISH_LOWER).lower()
    return _WHITESPACE.sub("", _NON_WORD.sub("", lowered))


def digits_only(text: Optional[str]) -> str:
    return _NON_DIGIT.sub("", text or "")


def _matches_phone(query: str, phone: Optional[str]) -> bool:
    query_digits = digits_only(query)
    return bool(query_digits) and query_digits in digits_only(phone)


def lead_matches(lead: Lead, query: str) -> bool:
    """True when ``query`` matches the lead's name, email, country or phone."""
    needle = normalize(query)
    if needle:
        haystacks = (
            lead.first_name,
            lead.last_name,
            f"{lead.first_name} {lead.last_name}",
            lead.email,
            lead.country,
        )
        if any(needle in normalize(h) for h in haystacks):
            return True
    return _matches_phone(query, lead.phone)


def filter_leads(leads: Iterable[Lead], query: str) -> list[Lead]:
    if not query or not query.strip():
        return []
    return [lead for lead in leads if lead_matches(lead, query)]
