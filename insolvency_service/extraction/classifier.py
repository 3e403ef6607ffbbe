from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from insolvency_service.extraction.config import ExtractionConfig
from insolvency_service.extraction.document import PageSource
from insolvency_service.extraction.types import PageMetrics

logger = logging.getLogger(__name__)

_DIGIT_RE = re.compile(r"\d")
_WORD_CHAR_RE = re.compile(r"\w")
_NON_WS_RE = re.compile(r"\S")


def compute_page_metrics(text: str) -> PageMetrics:
    """
    Metrics of a page's native text, used only for the scanned-page decision.

    - digit_percentage: digits as a share of non-whitespace characters
    - letter_percentage: word characters as a share of all characters
    """
    text_length = len(text)
    non_ws = len(_NON_WS_RE.findall(text))
    digits = len(_DIGIT_RE.findall(text))
    letters = len(_WORD_CHAR_RE.findall(text))
    return PageMetrics(
        text_length=text_length,
        word_count=len(text.split()),
        digit_percentage=(digits / non_ws * 100.0) if non_ws else 0.0,
        letter_percentage=(letters / text_length * 100.0) if text_length else 0.0,
    )


class ScanPolicy(Protocol):
    def is_scanned(self, text: str) -> bool: ...


@dataclass(frozen=True)
class MinLengthPolicy:
    """Single-threshold gate: any page whose native text is shorter than min_chars goes to OCR."""

    min_chars: int = 100

    def is_scanned(self, text: str) -> bool:
        return len(text) < self.min_chars


@dataclass(frozen=True)
class HeuristicScanPolicy:
    """A page is scanned if any one of the four metric conditions holds."""

    min_chars: int = 50
    min_words: int = 10
    max_digit_pct: float = 80.0
    min_letter_pct: float = 20.0

    def reasons(self, metrics: PageMetrics) -> list[str]:
        out: list[str] = []
        if metrics.text_length < self.min_chars:
            out.append("too_short")
        if metrics.word_count < self.min_words:
            out.append("too_few_words")
        if metrics.digit_percentage > self.max_digit_pct:
            out.append("mostly_digits")
        if metrics.letter_percentage < self.min_letter_pct:
            out.append("low_letter_ratio")
        return out

    def is_scanned(self, text: str) -> bool:
        return bool(self.reasons(compute_page_metrics(text)))


def policy_from_config(cfg: ExtractionConfig) -> ScanPolicy:
    if cfg.scan_policy == "heuristic":
        return HeuristicScanPolicy(
            min_chars=cfg.scan_min_chars,
            min_words=cfg.scan_min_words,
            max_digit_pct=cfg.scan_max_digit_pct,
            min_letter_pct=cfg.scan_min_letter_pct,
        )
    return MinLengthPolicy(min_chars=cfg.ocr_min_chars)


@dataclass(frozen=True)
class PageAssessment:
    page_number: int
    is_scanned: bool
    metrics: PageMetrics | None  # None when the page text could not be read


def assess_page(document: PageSource, page_number: int, policy: ScanPolicy) -> PageAssessment:
    """Classify one page; unreadable pages are treated as scanned."""
    try:
        text = document.page_text(page_number)
        metrics = compute_page_metrics(text)
    except Exception as e:
        logger.warning("Page %d: native text unreadable, assuming scanned: %s", page_number, e)
        return PageAssessment(page_number=page_number, is_scanned=True, metrics=None)
    return PageAssessment(page_number=page_number, is_scanned=policy.is_scanned(text), metrics=metrics)


def detect_scanned_pages(document: PageSource, policy: ScanPolicy) -> list[PageAssessment]:
    return [assess_page(document, n, policy) for n in range(1, document.page_count + 1)]
