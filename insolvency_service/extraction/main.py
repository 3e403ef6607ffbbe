from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any

from google.cloud.storage import Client

from insolvency_service.extraction.classifier import detect_scanned_pages, policy_from_config
from insolvency_service.extraction.cli import build_parser
from insolvency_service.extraction.config import ExtractionConfig
from insolvency_service.extraction.document import PdfDocument
from insolvency_service.extraction.errors import ExtractionError, NoMeaningfulTextError
from insolvency_service.extraction.gcs import download_bytes, parse_gs_uri
from insolvency_service.extraction.pipeline import PdfTextExtractor
from insolvency_service.forms.financial import extract_financial_data, find_financial_terms
from insolvency_service.forms.recognition import (
    extract_form_fields,
    identify_form_type,
    is_form_31,
    review_form_31,
    validate_form_fields,
)
from insolvency_service.logging_config import setup_logging


def _load_source(source: str) -> bytes:
    if source.startswith("gs://"):
        bucket, name = parse_gs_uri(source)
        return download_bytes(Client(), bucket, name)
    return Path(source).read_bytes()


def _forms_report(text: str) -> dict[str, Any]:
    fields = extract_form_fields(text)
    validation = validate_form_fields(fields)
    report: dict[str, Any] = {
        "form_type": identify_form_type(text).value,
        "fields": fields,
        "validation": dataclasses.asdict(validation),
        "financial_terms": find_financial_terms(text),
        "financial": dataclasses.asdict(extract_financial_data(text)),
    }
    if is_form_31(text):
        review = review_form_31(text)
        report["form31_review"] = {**dataclasses.asdict(review), "has_section_issues": review.has_section_issues}
    return report


def _emit(report: dict[str, Any]) -> None:
    json.dump(report, sys.stdout, indent=2)
    sys.stdout.write("\n")


async def _amain() -> int:
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(level=args.log_level.upper())
    logger = logging.getLogger("insolvency_service.extraction")

    cfg = ExtractionConfig.from_env()
    # CLI overrides
    overrides: dict[str, str] = {}
    if args.ocr_engine:
        overrides["ocr_engine"] = args.ocr_engine
    if args.scan_policy:
        overrides["scan_policy"] = args.scan_policy
    cfg = dataclasses.replace(cfg, **overrides)
    cfg.validate()

    data = await asyncio.to_thread(_load_source, args.source)
    logger.info("Loaded %s (%d bytes)", args.source, len(data))

    try:
        if args.detect_scanned:
            with PdfDocument.open(data) as document:
                assessments = detect_scanned_pages(document, policy_from_config(cfg))
            _emit(
                {
                    "source": args.source,
                    "scan_policy": cfg.scan_policy,
                    "pages": [
                        {
                            "page_number": a.page_number,
                            "is_scanned": a.is_scanned,
                            "metrics": dataclasses.asdict(a.metrics) if a.metrics else None,
                        }
                        for a in assessments
                    ],
                }
            )
            return 0

        result = await PdfTextExtractor.from_config(cfg).extract(data)
    except NoMeaningfulTextError as e:
        logger.error("%s: %s", args.source, e)
        _emit({"source": args.source, "error": str(e), **e.result.to_dict()})
        return 2
    except ExtractionError as e:
        logger.error("%s: %s", args.source, e)
        _emit({"source": args.source, "error": str(e)})
        return 2

    report: dict[str, Any] = {"source": args.source, **result.to_dict()}
    if args.forms:
        report.update(_forms_report(result.text))
    _emit(report)
    return 0


def main() -> None:
    raise SystemExit(asyncio.run(_amain()))


if __name__ == "__main__":
    main()
