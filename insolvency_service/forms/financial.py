from __future__ import annotations

import re

from insolvency_service.extraction.vocabulary import FINANCIAL_TERMS
from insolvency_service.forms.types import FinancialSummary

_AMOUNT = r"\$?\s?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{2})?"
_AMOUNT_RE = re.compile(rf"(?<![\w.]){_AMOUNT}(?![\d,]*\d)")

# Category -> label; the first amount within a short window after the label is taken
_CATEGORIES: dict[str, str] = {
    "income": r"(?:monthly\s+)?(?:net\s+)?income",
    "rent": r"rent|mortgage",
    "utilities": r"utilities|hydro|electricity",
    "food": r"food|groceries",
    "transportation": r"transportation|transit|car\s+payment",
}

_CATEGORY_RES: dict[str, re.Pattern[str]] = {
    name: re.compile(rf"\b(?:{label})\b.{{0,20}}?({_AMOUNT})", re.IGNORECASE | re.DOTALL)
    for name, label in _CATEGORIES.items()
}

_TERM_RES: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (term, re.compile(r"\b" + r"\s+".join(re.escape(w) for w in term.split()) + r"\b", re.IGNORECASE))
    for term in FINANCIAL_TERMS
)


def parse_amount(raw: str) -> float:
    return float(raw.replace("$", "").replace(",", "").strip())


def find_financial_terms(text: str) -> list[str]:
    """Domain terms present in text, in vocabulary order."""
    return [term for term, pattern in _TERM_RES if pattern.search(text)]


def extract_financial_data(text: str) -> FinancialSummary:
    amounts = [parse_amount(m.group(0)) for m in _AMOUNT_RE.finditer(text)]

    categorized: dict[str, float] = {}
    for name, pattern in _CATEGORY_RES.items():
        m = pattern.search(text)
        if m:
            categorized[name] = parse_amount(m.group(1))

    return FinancialSummary(
        amounts=amounts,
        categorized=categorized,
        confidence="high" if amounts else "low",
    )
