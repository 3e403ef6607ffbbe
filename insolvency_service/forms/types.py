from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FormType(str, Enum):
    BANKRUPTCY = "bankruptcy"
    PROPOSAL = "proposal"
    MEETING = "meeting"
    COURT = "court"
    PROOF_OF_CLAIM = "proof-of-claim"
    CONSUMER_PROPOSAL = "consumer-proposal"
    UNKNOWN = "unknown"


# Sparse: a missing key means "not found"
ExtractedFormFields = dict[str, str]

REQUIRED_FIELDS: tuple[str, ...] = ("formNumber", "clientName", "dateSigned")


@dataclass(frozen=True)
class FormValidation:
    valid: bool
    missing: list[str]


@dataclass
class Form31Review:
    company_name: str | None = None
    is_company: bool = False
    claim_amount: str | None = None
    claim_type_selected: bool = False
    section_issues: dict[str, str] = field(default_factory=dict)

    @property
    def has_section_issues(self) -> bool:
        return bool(self.section_issues)


@dataclass(frozen=True)
class FinancialSummary:
    amounts: list[float]
    categorized: dict[str, float]
    confidence: str  # "high" | "low"
