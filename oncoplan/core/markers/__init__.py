"""
Marker Classification

Free-text clinical markers -> numeric domain values.

Usage:
    from oncoplan.core.markers import classify

    classified = classify(patient.markers)
    classified.node_stage, classified.her2_positive
"""
from .classifier import (
    ClassifiedMarkers,
    classify,
    parse_grade,
    parse_her2_score,
    parse_ki67,
    parse_node_stage,
    parse_receptor_percent,
    parse_recurrence_score,
    parse_serum_creatinine,
    parse_tumor_size,
)

__all__ = [
    "ClassifiedMarkers",
    "classify",
    "parse_grade",
    "parse_her2_score",
    "parse_ki67",
    "parse_node_stage",
    "parse_receptor_percent",
    "parse_recurrence_score",
    "parse_serum_creatinine",
    "parse_tumor_size",
]
