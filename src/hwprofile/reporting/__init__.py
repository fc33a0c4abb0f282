"""
Report Exporter

Key/value, text and JSON output for classification results.
"""

from .report import (
    DetectionReport,
    ReportGenerator,
    parse_kv_report,
)

__all__ = [
    'DetectionReport',
    'ReportGenerator',
    'parse_kv_report',
]
