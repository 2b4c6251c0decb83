"""CARC, RARC and PLB reason code lookup.

Code tables live in ``codes/*.yaml`` next to this module and are loaded
once on first use. They cover the codes most often seen in outpatient
therapy remittances, including Texas Medicaid (TMHP) and commercial
payers.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path

import yaml

from ..x12.qualifiers import ADJUSTMENT_GROUP_DESCRIPTIONS

logger = logging.getLogger(__name__)

CODES_DIR = Path(__file__).parent / "codes"


class CodeKind(str, Enum):
    """Code tables available for lookup."""

    CARC = "carc"
    RARC = "rarc"
    PLB = "plb"


class DenialCategory(str, Enum):
    """Denial scenarios worth surfacing to billing staff."""

    VISIT_LIMIT = "VISIT_LIMIT"
    NO_PRIOR_AUTH = "NO_PRIOR_AUTH"
    BUNDLED = "BUNDLED"
    MEDICAL_NECESSITY = "MEDICAL_NECESSITY"
    NOT_COVERED = "NOT_COVERED"
    OTHER = "OTHER"


DENIAL_CATEGORIES: dict[DenialCategory, frozenset[str]] = {
    DenialCategory.VISIT_LIMIT: frozenset({"35", "119", "151"}),
    DenialCategory.NO_PRIOR_AUTH: frozenset({"15", "39", "197", "198"}),
    DenialCategory.BUNDLED: frozenset({"59", "97", "234", "236"}),
    DenialCategory.MEDICAL_NECESSITY: frozenset({"50", "56", "150"}),
    DenialCategory.NOT_COVERED: frozenset(
        {"4", "5", "96", "109", "170", "171", "179", "204", "A1", "B1", "B5"}
    ),
    # Zero-payment denials with no more specific category
    DenialCategory.OTHER: frozenset({"18", "29", "31", "32", "33"}),
}

_UNKNOWN_MESSAGES = {
    CodeKind.CARC: "Unknown adjustment reason code: {code}",
    CodeKind.RARC: "Unknown remark code: {code}",
    CodeKind.PLB: "Unknown provider adjustment reason: {code}",
}


@lru_cache(maxsize=None)
def load_code_table(kind: CodeKind) -> dict[str, str]:
    """Load one code table from its YAML file.

    Returns:
        Mapping of code to description. Keys are always strings.
    """
    kind = CodeKind(kind)
    file_path = CODES_DIR / f"{kind.value}.yaml"
    with open(file_path) as f:
        data = yaml.safe_load(f) or {}
    table = {str(code): str(description) for code, description in data.items()}
    logger.debug(f"Loaded {len(table)} {kind.value.upper()} codes from {file_path.name}")
    return table


def lookup_code(kind: CodeKind | str, code: str) -> str:
    """Look up a description, falling back to an ``Unknown ...`` message."""
    kind = CodeKind(kind)
    table = load_code_table(kind)
    return table.get(code) or _UNKNOWN_MESSAGES[kind].format(code=code)


def is_known_code(kind: CodeKind | str, code: str) -> bool:
    return code in load_code_table(CodeKind(kind))


def lookup_carc(code: str) -> str:
    """Look up a Claim Adjustment Reason Code description."""
    return lookup_code(CodeKind.CARC, code)


def lookup_rarc(code: str) -> str:
    """Look up a Remittance Advice Remark Code description."""
    return lookup_code(CodeKind.RARC, code)


def lookup_plb_reason(code: str) -> str:
    """Look up a provider level adjustment reason description."""
    return lookup_code(CodeKind.PLB, code)


def categorize_denial(code: str) -> DenialCategory | None:
    """Return the denial category for a CARC, or None if it is not a denial."""
    for category, codes in DENIAL_CATEGORIES.items():
        if code in codes:
            return category
    return None


def describe_adjustment(group_code: str, reason_code: str) -> str:
    """Combine a CAS group code and reason into one description.

    Example:
        >>> describe_adjustment("PR", "3")
        'Patient Responsibility: Copayment amount'
    """
    group = ADJUSTMENT_GROUP_DESCRIPTIONS.get(group_code, group_code)
    return f"{group}: {lookup_carc(reason_code)}"
