"""Statutory form classification and field extraction.

Works on either native PDF text or normalized OCR text. Normalized text has
lost colons, slashes and apostrophes, so every label pattern treats that
punctuation as optional.
"""

from __future__ import annotations

import logging
import re

from insolvency_service.forms.types import (
    REQUIRED_FIELDS,
    ExtractedFormFields,
    Form31Review,
    FormType,
    FormValidation,
)

logger = logging.getLogger(__name__)

_I = re.IGNORECASE

# Checked before the generic table; they also pin formNumber/formType.
_SPECIAL_CASES: tuple[tuple[re.Pattern[str], str, FormType], ...] = (
    (re.compile(r"\bform\s*31\b|\bproof\s*of\s*claim\b", _I), "31", FormType.PROOF_OF_CLAIM),
    (re.compile(r"\bform\s*47\b|\bconsumer\s*proposal\b", _I), "47", FormType.CONSUMER_PROPOSAL),
)

# Ordered: first match wins
_FORM_PATTERNS: tuple[tuple[FormType, re.Pattern[str]], ...] = (
    (FormType.BANKRUPTCY, re.compile(r"bankruptcy|\bform\s*66\b|assignment", _I)),
    (FormType.PROPOSAL, re.compile(r"proposal|\bform\s*47\b", _I)),
    (FormType.MEETING, re.compile(r"meeting\s*of\s*creditors|\bform\s*29\b", _I)),
    (FormType.COURT, re.compile(r"court\s*order|\bform\s*35\b", _I)),
)

# Words that start the next label and so end a captured name
_STOP = r"(?:trustee|administrator|date|dated|signed|claimant|creditor|debtor|client|bankrupt|form|address|amount|telephone|phone|email|of\s+the)\b"
_NAME = rf"((?!{_STOP})[\w.&'-]+(?:[ \t]+(?!{_STOP})[\w.&'-]+){{0,6}})"

_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?"
_DATE = (
    r"(\d{4}-\d{1,2}-\d{1,2}"
    r"|\d{1,2}[/.\-]\d{1,2}[/.\-]\d{2,4}"
    rf"|{_MONTH}\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}}"
    rf"|\d{{1,2}}(?:st|nd|rd|th)?\s+(?:day\s+of\s+)?{_MONTH},?\s+\d{{4}})"
)

_FIELD_PATTERNS: dict[str, re.Pattern[str]] = {
    "formNumber": re.compile(r"\bform\s*(?:no\.?|number|#)?\s*[:.\-]?\s*(\d{1,3}(?:\.\d)?[a-z]?)\b", _I),
    "clientName": re.compile(rf"\b(?:debtor|client|bankrupt)(?:'?s)?\s*name\s*[:\-]?\s*{_NAME}", _I),
    "trusteeName": re.compile(
        r"(?:\b(?:trustee|administrator)(?:'?s)?\s*name\s*[:\-]?"
        r"|\b(?:trustee|administrator)\s*[:\-]"
        r"|\b(?:trustee|administrator)\s+(?=(?-i:[A-Z]))"
        r"|\blicensed\s+insolvency\s+trustee(?:\s*\(?lit\)?)?\s*[:\-]?"
        r"|\blit\s*[:\-])"
        rf"\s*{_NAME}",
        _I,
    ),
    "claimantName": re.compile(
        rf"(?:\b(?:creditor|claimant)(?:'?s)?\s*name|\bname\s*of\s*(?:the\s+)?(?:creditor|claimant))\s*[:\-]?\s*{_NAME}",
        _I,
    ),
    "dateSigned": re.compile(rf"\b(?:date\s*signed|signed\s*(?:on|this)?|dated|date)\s*[:\-]?\s*{_DATE}", _I),
    "proposalType": re.compile(r"\b(consumer|division\s*(?:i|1|one))\s*proposal\b", _I),
    "amountClaimed": re.compile(
        r"\b(?:amount\s*claimed|claim\s*amount|total\s*claim)(?:\s*of)?\s*[:\-]?\s*\$?\s*(\d[\d,]*(?:\.\d{1,2})?)",
        _I,
    ),
}

_COMPANY_RE = re.compile(r"\b(?:ltd|inc|limited|corporation|corp|company|enterprises?)\b", _I)

_FORM31_INDICATORS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bform\s*31\b", _I),
    re.compile(r"proof\s*of\s*claim", _I),
    re.compile(r"bankruptcy\s*and\s*insolvency\s*act", _I),
    re.compile(r"notice\s*of\s*claim", _I),
    re.compile(r"creditor(?:'?s)?\s*name", _I),
)

_CHECKBOX_RE = re.compile(r"\[\s*x\s*\]|☑|☒", _I)
_SECTION_HEADER_RE = re.compile(r"(?:^|\s)(?:\d{1,2}|[IVX]{1,4})\.\s+[A-Z]")
_SECTION4_RE = re.compile(r"(?:4|IV|FOUR)[.\s]*(?:PARTICULARS?|DETAILS|AMOUNT)[.\s]*(?:OF|REGARDING)[.\s]*(?:CLAIM|DEBT)", _I)
_SECTION5_RE = re.compile(r"(?:5|V|FIVE)[.\s]*(?:PARTICULARS|DETAILS)[.\s]*(?:OF|REGARDING)[.\s]*(?:RELATIONSHIP|RELATEDNESS)", _I)
_SECTION6_RE = re.compile(r"(?:6|VI|SIX)[.\s]*(?:PARTICULARS|DETAILS)[.\s]*(?:OF|REGARDING)[.\s]*(?:ASSIGNMENT|TRANSFER)", _I)


def _special_case(text: str) -> tuple[str, FormType] | None:
    for pattern, number, form_type in _SPECIAL_CASES:
        if pattern.search(text):
            return number, form_type
    return None


def identify_form_type(text: str) -> FormType:
    special = _special_case(text)
    if special is not None:
        return special[1]

    for form_type, pattern in _FORM_PATTERNS:
        if pattern.search(text):
            return form_type
    return FormType.UNKNOWN


def _clean_value(value: str) -> str:
    return value.strip().rstrip(",;:").strip()


def extract_form_fields(text: str) -> ExtractedFormFields:
    fields: ExtractedFormFields = {}

    for key, pattern in _FIELD_PATTERNS.items():
        m = pattern.search(text)
        if m and m.group(1):
            value = _clean_value(m.group(1))
            if value:
                fields[key] = value

    if "proposalType" in fields:
        fields["proposalType"] = "consumer" if fields["proposalType"].lower() == "consumer" else "division-1"

    for name_key in ("clientName", "claimantName"):
        if name_key in fields and _COMPANY_RE.search(fields[name_key]):
            fields["isCompany"] = "true"
            break

    special = _special_case(text)
    if special is not None:
        fields["formNumber"], form_type = special[0], special[1]
        fields["formType"] = form_type.value
    else:
        form_type = identify_form_type(text)
        if form_type is not FormType.UNKNOWN:
            fields["formType"] = form_type.value

    return fields


def validate_form_fields(fields: ExtractedFormFields) -> FormValidation:
    missing = [f for f in REQUIRED_FIELDS if not fields.get(f)]
    return FormValidation(valid=not missing, missing=missing)


def is_form_31(text: str) -> bool:
    return any(p.search(text) for p in _FORM31_INDICATORS)


def _section_text(text: str, heading: re.Pattern[str]) -> str | None:
    """Text between a section heading and the next numbered heading; None if absent."""
    m = heading.search(text)
    if m is None:
        return None
    rest = text[m.end():]
    nxt = _SECTION_HEADER_RE.search(rest)
    return (rest[: nxt.start()] if nxt else rest).strip()


def review_form_31(text: str) -> Form31Review:
    """Form 31 (proof of claim) specifics: claimant company, amount, and section completeness."""
    review = Form31Review()

    m = re.search(rf"\b(?:bankrupt|debtor|company)(?:'?s)?\s*name\s*[:\-]?\s*{_NAME}", text, _I)
    if m:
        review.company_name = _clean_value(m.group(1)) or None
        review.is_company = bool(review.company_name and _COMPANY_RE.search(review.company_name))

    m = _FIELD_PATTERNS["amountClaimed"].search(text)
    if m:
        review.claim_amount = m.group(1).replace(",", "").replace("$", "").strip()

    review.claim_type_selected = bool(_CHECKBOX_RE.search(text))

    section4 = _section_text(text, _SECTION4_RE)
    if section4 is not None and not review.claim_type_selected:
        review.section_issues["section4"] = "Missing checkbox selections in claim category"

    section5 = _section_text(text, _SECTION5_RE)
    if section5 is not None and not _CHECKBOX_RE.search(section5):
        review.section_issues["section5"] = "Missing relatedness declaration"

    section6 = _section_text(text, _SECTION6_RE)
    if section6 is not None and len(section6) < 10:
        review.section_issues["section6"] = "No disclosure of transfers or payments"

    if review.has_section_issues:
        logger.info("Form 31 review found %d section issue(s)", len(review.section_issues))
    return review
