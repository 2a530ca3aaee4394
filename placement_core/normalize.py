from __future__ import annotations
import re
import unicodedata

_PUNCT_RX = re.compile(r"[^0-9A-Za-z_\s]")
_SPACE_RX = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Canonical form for free-text comparison.

    Lower-cases, strips accents (NFD + drop combining marks), drops
    punctuation and collapses any Unicode whitespace (NBSP included), so
    "  Analgésico. " == "analgesico".
    """
    s = str(text or "").lower().strip()
    s = "".join(ch for ch in unicodedata.normalize("NFD", s) if not unicodedata.combining(ch))
    s = _PUNCT_RX.sub("", s)
    return _SPACE_RX.sub(" ", s).strip()
