"""
Marker Classifier

Converts free-text clinical marker entries into numeric / ordinal values the
rule modules can compare against thresholds.

Every parser is total: unparsable input silently degrades to 0 (or None for
optional markers) instead of raising. A missing node stage therefore reads as
N0 and a missing grade as 0.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from oncoplan.core.clinical.base import ClinicalMarkers

_NUMBER = re.compile(r"[^\d.]")

# Representative value for each receptor-percentage bucket offered by the form
_RECEPTOR_BUCKETS = {
    "0%": 0.0,
    "0": 0.0,
    "1%-10%": 5.0,
    "1-10%": 5.0,
    "10%-50%": 30.0,
    "10-50%": 30.0,
    ">50%": 75.0,
}

_AMPLIFIED_TOKENS = ("FISH+", "ISH+", "AMPLIFIED", "AMP+")
_NOT_AMPLIFIED_TOKENS = ("NONAMPLIFIED", "NOTAMPLIFIED", "UNAMPLIFIED", "NOAMPLIFICATION", "FISH-", "ISH-", "NEGATIVE")


@dataclass
class ClassifiedMarkers:
    """Numeric view of ClinicalMarkers."""
    er_percent: float = 0.0
    pr_percent: float = 0.0
    her2_score: int = 0             # IHC 0 / 1+ / 2+ / 3+
    her2_amplified: bool = False    # ISH-confirmed amplification
    ki67: float = 0.0               # percent
    tumor_size_cm: float = 0.0
    node_stage: int = 0             # N0..N3
    grade: int = 0                  # G1..G3, 0 = unknown
    menopausal: bool = False
    recurrence_score: Optional[float] = None
    serum_creatinine: Optional[float] = None   # µmol/L

    @property
    def her2_positive(self) -> bool:
        return self.her2_score >= 3 or (self.her2_score == 2 and self.her2_amplified)

    @property
    def hormone_receptor_positive(self) -> bool:
        return self.er_percent > 0 or self.pr_percent > 0


def _leading_number(text: Optional[str]) -> Optional[float]:
    if not text:
        return None
    cleaned = _NUMBER.sub("", text)
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_tumor_size(text: Optional[str]) -> float:
    """Tumor size in cm; "2.5cm" -> 2.5."""
    return _leading_number(text) or 0.0


def parse_node_stage(text: Optional[str]) -> int:
    """Highest N-stage mentioned wins: "cN1-N2" -> 2."""
    if not text:
        return 0
    upper = text.upper()
    for stage in (3, 2, 1):
        if f"N{stage}" in upper:
            return stage
    return 0


def parse_grade(text: Optional[str]) -> int:
    if not text:
        return 0
    upper = text.upper()
    for grade in (3, 2, 1):
        if f"G{grade}" in upper or str(grade) in upper:
            return grade
    return 0


def parse_ki67(text: Optional[str]) -> float:
    """Proliferation index in percent; "30%" -> 30.0."""
    return _leading_number(text) or 0.0


def parse_receptor_percent(text: Optional[str]) -> float:
    """
    ER/PR expression as a representative percentage.

    Bucket strings map to 0 / 5 / 30 / 75; any other text is read as a plain
    percentage.
    """
    if not text:
        return 0.0
    key = text.strip().replace(" ", "").replace("–", "-")
    if key in _RECEPTOR_BUCKETS:
        return _RECEPTOR_BUCKETS[key]
    return _leading_number(key) or 0.0


def parse_her2_score(text: Optional[str]) -> int:
    """IHC score 0-3 from entries like "2+", "HER2 3+", "IHC 1+ (low)"."""
    if not text:
        return 0
    match = re.search(r"([0-3])\s*\+", text)
    if match:
        return int(match.group(1))
    if "POSITIVE" in text.upper():
        return 3
    return 0


def parse_her2_amplified(text: Optional[str]) -> bool:
    if not text:
        return False
    upper = text.upper().replace(" ", "").replace("-AMP", "AMP")
    # negations contain the positive tokens, so they are checked first
    if any(token in upper for token in _NOT_AMPLIFIED_TOKENS):
        return False
    return any(token in upper for token in _AMPLIFIED_TOKENS)


def parse_recurrence_score(text: Optional[str]) -> Optional[float]:
    """Genomic recurrence score, or None when absent / unparsable."""
    return _leading_number(text)


def parse_serum_creatinine(text: Optional[str]) -> Optional[float]:
    value = _leading_number(text)
    if value is None or value <= 0:
        return None
    return value


def classify(markers: ClinicalMarkers) -> ClassifiedMarkers:
    """Classify every marker at once."""
    return ClassifiedMarkers(
        er_percent=parse_receptor_percent(markers.er_status),
        pr_percent=parse_receptor_percent(markers.pr_status),
        her2_score=parse_her2_score(markers.her2_status),
        her2_amplified=parse_her2_amplified(markers.her2_status),
        ki67=parse_ki67(markers.ki67),
        tumor_size_cm=parse_tumor_size(markers.tumor_size),
        node_stage=parse_node_stage(markers.node_status),
        grade=parse_grade(markers.histological_grade),
        menopausal=bool(markers.menopause),
        recurrence_score=parse_recurrence_score(markers.genetic_test_result),
        serum_creatinine=parse_serum_creatinine(markers.serum_creatinine),
    )
