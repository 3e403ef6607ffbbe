"""Domain vocabulary shared by the text normalizer and form recognition."""

from __future__ import annotations

# Frequent OCR misreads of insolvency vocabulary -> intended word.
# Keys are matched whole-word and case-insensitively.
OCR_CORRECTIONS: dict[str, str] = {
    "bankruptcv": "bankruptcy",
    "bankruptey": "bankruptcy",
    "bankruplcy": "bankruptcy",
    "bankrupl": "bankrupt",
    "credltor": "creditor",
    "creditcr": "creditor",
    "credltors": "creditors",
    "debtcr": "debtor",
    "dcbtor": "debtor",
    "trustce": "trustee",
    "tmstee": "trustee",
    "truslee": "trustee",
    "insolvencv": "insolvency",
    "insolvcncy": "insolvency",
    "proposai": "proposal",
    "c1aim": "claim",
    "ciaim": "claim",
    "dividcnd": "dividend",
    "sccured": "secured",
    "unsccured": "unsecured",
    "discharqe": "discharge",
    "assiqnment": "assignment",
    "receivcr": "receiver",
    "statcment": "statement",
    "liabilitics": "liabilities",
}

# Canonical financial and legal terms. Multi-word entries are re-joined with
# single spaces when OCR splits or merges their words.
FINANCIAL_TERMS: tuple[str, ...] = (
    "bankruptcy",
    "insolvency",
    "consumer proposal",
    "division I proposal",
    "trustee",
    "licensed insolvency trustee",
    "creditor",
    "secured creditor",
    "unsecured creditor",
    "preferred creditor",
    "debtor",
    "proof of claim",
    "statement of affairs",
    "meeting of creditors",
    "assignment in bankruptcy",
    "discharge",
    "dividend",
    "surplus income",
    "monthly income",
    "net income",
    "assets",
    "liabilities",
    "unsecured debt",
    "secured debt",
    "payment schedule",
    "stay of proceedings",
    "official receiver",
    "Bankruptcy and Insolvency Act",
    "Superintendent of Bankruptcy",
    "counselling session",
)
