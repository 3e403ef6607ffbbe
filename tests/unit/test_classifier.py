"""Unit tests for the scanned-page classifier."""

from __future__ import annotations

import pytest

from insolvency_service.extraction.classifier import (
    HeuristicScanPolicy,
    MinLengthPolicy,
    compute_page_metrics,
    detect_scanned_pages,
    policy_from_config,
)
from insolvency_service.extraction.config import ExtractionConfig

PROSE = "The debtor filed an assignment in bankruptcy with the licensed insolvency trustee today."


class TestComputePageMetrics:
    def test_empty_text(self):
        m = compute_page_metrics("")
        assert m.text_length == 0
        assert m.word_count == 0
        assert m.digit_percentage == 0.0
        assert m.letter_percentage == 0.0

    def test_digit_share_ignores_whitespace(self):
        m = compute_page_metrics("12 34 ab")
        # 6 non-whitespace chars, 4 digits
        assert m.digit_percentage == pytest.approx(4 / 6 * 100)

    def test_letter_share_counts_word_chars_over_all_chars(self):
        m = compute_page_metrics("ab -- cd")
        assert m.letter_percentage == pytest.approx(4 / 8 * 100)
        assert m.word_count == 3


class TestMinLengthPolicy:
    def test_boundary(self):
        policy = MinLengthPolicy(min_chars=100)
        assert policy.is_scanned("x" * 99)
        assert not policy.is_scanned("x" * 100)

    def test_empty_page_is_scanned(self):
        assert MinLengthPolicy().is_scanned("")


class TestHeuristicScanPolicy:
    def test_prose_page_is_not_scanned(self):
        assert not HeuristicScanPolicy().is_scanned(PROSE)

    def test_too_short_boundary(self):
        policy = HeuristicScanPolicy()
        ten_words = " ".join(["abcd"] * 10)  # 49 chars
        assert len(ten_words) == 49
        assert policy.reasons(compute_page_metrics(ten_words)) == ["too_short"]
        assert not policy.is_scanned(ten_words + "e")

    def test_too_few_words_boundary(self):
        policy = HeuristicScanPolicy()
        nine_words = " ".join(["abcdefgh"] * 9)
        assert "too_few_words" in policy.reasons(compute_page_metrics(nine_words))
        assert not policy.is_scanned(nine_words + " abcdefgh")

    def test_mostly_digits(self):
        text = " ".join(["1234567890"] * 10) + " ab"
        reasons = HeuristicScanPolicy().reasons(compute_page_metrics(text))
        assert reasons == ["mostly_digits"]

    def test_digit_share_at_threshold_is_not_scanned(self):
        # exactly 80% digits over non-whitespace chars
        text = " ".join(["12345678ab"] * 10)
        m = compute_page_metrics(text)
        assert m.digit_percentage == pytest.approx(80.0)
        assert "mostly_digits" not in HeuristicScanPolicy().reasons(m)

    def test_low_letter_ratio(self):
        text = " ".join(["a----------"] * 12)
        reasons = HeuristicScanPolicy().reasons(compute_page_metrics(text))
        assert reasons == ["low_letter_ratio"]

    def test_letter_share_at_threshold_is_not_scanned(self):
        # one word character in every five characters
        text = "a--- " * 20
        m = compute_page_metrics(text)
        assert m.letter_percentage == pytest.approx(20.0)
        assert HeuristicScanPolicy().reasons(m) == []

    def test_letter_share_just_below_threshold_is_scanned(self):
        text = "a--- " * 20 + "-"
        m = compute_page_metrics(text)
        assert m.letter_percentage == pytest.approx(19.8, abs=0.01)
        assert HeuristicScanPolicy().reasons(m) == ["low_letter_ratio"]

    def test_any_single_condition_marks_scanned(self):
        assert HeuristicScanPolicy().is_scanned("short")

    def test_idempotent(self):
        policy = HeuristicScanPolicy()
        assert policy.is_scanned(PROSE) == policy.is_scanned(PROSE)


class TestPolicyFromConfig:
    def test_default_is_length_policy(self):
        policy = policy_from_config(ExtractionConfig())
        assert policy == MinLengthPolicy(min_chars=100)

    def test_heuristic_carries_thresholds(self):
        cfg = ExtractionConfig(scan_policy="heuristic", scan_min_chars=30, scan_min_words=5)
        policy = policy_from_config(cfg)
        assert isinstance(policy, HeuristicScanPolicy)
        assert policy.min_chars == 30
        assert policy.min_words == 5


class TestDetectScannedPages:
    def test_reports_every_page_in_order(self, fake_document):
        doc = fake_document([PROSE * 2, "", PROSE * 2])
        out = detect_scanned_pages(doc, MinLengthPolicy())
        assert [a.page_number for a in out] == [1, 2, 3]
        assert [a.is_scanned for a in out] == [False, True, False]
        assert out[0].metrics is not None

    def test_unreadable_page_defaults_to_scanned(self, fake_document):
        doc = fake_document([PROSE * 2, RuntimeError("broken content stream")])
        out = detect_scanned_pages(doc, MinLengthPolicy())
        assert out[1].is_scanned is True
        assert out[1].metrics is None
