from __future__ import annotations

import re

from insolvency_service.extraction.vocabulary import FINANCIAL_TERMS, OCR_CORRECTIONS

_WS_RE = re.compile(r"\s+")

# Allow-list: word characters, whitespace, hyphen, period, comma, parentheses, $ and %
_DISALLOWED_RE = re.compile(r"[^\w\s\-.,()$%]")

_CORRECTION_RE = re.compile(
    r"\b(" + "|".join(re.escape(k) for k in sorted(OCR_CORRECTIONS, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)


def _term_pattern(term: str) -> re.Pattern[str]:
    words = term.split()
    body = r"\s*".join(f"({re.escape(w)})" for w in words)
    return re.compile(rf"\b{body}\b", re.IGNORECASE)


# Only multi-word terms can be mangled by spacing; longest first so
# "licensed insolvency trustee" wins over "trustee".
_TERM_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    _term_pattern(t) for t in sorted(FINANCIAL_TERMS, key=len, reverse=True) if " " in t
)


def _match_case(source: str, replacement: str) -> str:
    if source.isupper() and len(source) > 1:
        return replacement.upper()
    if source[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def strip_disallowed(text: str) -> str:
    return _DISALLOWED_RE.sub("", text)


def apply_corrections(text: str) -> str:
    return _CORRECTION_RE.sub(
        lambda m: _match_case(m.group(0), OCR_CORRECTIONS[m.group(0).lower()]),
        text,
    )


def canonicalize_terms(text: str) -> str:
    for pattern in _TERM_PATTERNS:
        text = pattern.sub(lambda m: " ".join(m.groups()), text)
    return text


def clean(raw: str) -> str:
    """
    Normalize extracted or recognized text.

    Steps: collapse whitespace, drop characters outside the allow-list,
    fix common OCR misreads of domain words, re-space canonical multi-word
    terms. Numeric tokens pass through untouched since no rule targets digits.
    The output is a fixed point: clean(clean(x)) == clean(x).
    """
    if not raw:
        return ""
    text = collapse_whitespace(raw)
    text = strip_disallowed(text)
    text = apply_corrections(text)
    text = canonicalize_terms(text)
    # Stripping characters can leave doubled spaces behind
    return collapse_whitespace(text)
