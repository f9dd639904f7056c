"""Fingerprinting, overlap detection and effectiveness reporting."""

from concordia.comparison.effectiveness import compute_effectiveness
from concordia.comparison.fingerprint import NULL_LINE_SENTINEL, generate_fingerprint
from concordia.comparison.overlap import OverlapResult, detect_overlap
from concordia.comparison.report import build_report, compare_findings, compare_scan_outputs

__all__ = [
    "NULL_LINE_SENTINEL",
    "generate_fingerprint",
    "OverlapResult",
    "detect_overlap",
    "compute_effectiveness",
    "build_report",
    "compare_findings",
    "compare_scan_outputs",
]
