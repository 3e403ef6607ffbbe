from __future__ import annotations

import argparse

from insolvency_service.extraction.config import OCR_ENGINES, SCAN_POLICIES


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="insolvency-extract",
        description="Extract text (with OCR fallback) and form fields from a PDF",
    )

    p.add_argument("source", help="Local PDF path or gs://bucket/object")
    p.add_argument(
        "--ocr-engine",
        choices=OCR_ENGINES,
        default=None,
        help="Override INSOLVENCY_OCR_ENGINE",
    )
    p.add_argument(
        "--scan-policy",
        choices=SCAN_POLICIES,
        default=None,
        help="Override INSOLVENCY_SCAN_POLICY",
    )
    p.add_argument("--forms", action="store_true", help="Also classify the form and extract its fields")
    p.add_argument(
        "--detect-scanned",
        action="store_true",
        help="Only report which pages look scanned (no OCR)",
    )
    p.add_argument("--log-level", default="INFO", help="Python logging level (INFO, DEBUG, ...)")
    return p
