"""
hwprofile: hardware and virtualization classification

Inspects a running machine's firmware, bus and peripheral signals, scores
the laptop/desktop/workstation/server categories from weighted evidence,
detects the virtualization host, and recommends a configuration profile.

Usage:
    from hwprofile import ClassificationEngine

    report = ClassificationEngine().detect()
    print(report.hardware.category.value)
"""

from .core import (
    Category,
    Hypervisor,
    DesktopWeight,
    ConfidenceTier,
    Signal,
    HardwareFacts,
    HardwareClassification,
    VirtualizationClassification,
    Profile,
    HwProfileError,
    InformationUnavailableError,
    ReportParseError,
    ConfigError,
)
from .config import DetectorConfig, get_config
from .engine import ClassificationEngine
from .reporting import DetectionReport, ReportGenerator, parse_kv_report

__version__ = "1.0.0"

__all__ = [
    'Category',
    'Hypervisor',
    'DesktopWeight',
    'ConfidenceTier',
    'Signal',
    'HardwareFacts',
    'HardwareClassification',
    'VirtualizationClassification',
    'Profile',
    'HwProfileError',
    'InformationUnavailableError',
    'ReportParseError',
    'ConfigError',
    'DetectorConfig',
    'get_config',
    'ClassificationEngine',
    'DetectionReport',
    'ReportGenerator',
    'parse_kv_report',
]
