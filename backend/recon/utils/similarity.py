"""
String similarity helpers used for catalog lookup and invoice-number matching.
"""
import re
from typing import Optional

INVOICE_NUMBER_PATTERNS = [
    re.compile(r"INV[/-](\d{4})[/-](\d+)", re.IGNORECASE),
    re.compile(r"INVOICE[#\s]*(\d+)", re.IGNORECASE),
    re.compile(r"INV[#\s]*(\d+)", re.IGNORECASE),
    re.compile(r"BILL[#\s]*(\d+)", re.IGNORECASE),
]


def normalize_text(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def levenshtein_distance(s1: str, s2: str) -> int:
    """Number of single-character edits needed to turn s1 into s2"""
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1, start=1):
        current = [i]
        for j, c2 in enumerate(s2, start=1):
            cost = 0 if c1 == c2 else 1
            current.append(min(
                previous[j] + 1,        # deletion
                current[j - 1] + 1,     # insertion
                previous[j - 1] + cost  # substitution
            ))
        previous = current
    return previous[-1]


def similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """
    Normalized edit similarity in [0, 1] over trimmed, lower-cased strings.

    1 - distance / length of the longer string. Two empty strings are identical.
    """
    a = normalize_text(s1)
    b = normalize_text(s2)
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


def normalize_invoice_number(value: Optional[str]) -> str:
    """Lower-case and drop everything that isn't a letter or digit"""
    return re.sub(r"[^a-z0-9]", "", (value or "").lower())


def extract_invoice_number(text: Optional[str]) -> Optional[str]:
    """Pull the first invoice-number-looking token (INV-2024-001, INVOICE 12, BILL 7) out of free text"""
    if not text:
        return None
    for pattern in INVOICE_NUMBER_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None
