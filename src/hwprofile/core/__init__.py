"""
Core Data Structures

Value types, confidence tiers and errors shared across the hwprofile
engine.
"""

from .structures import (
    Category,
    CATEGORY_PRIORITY,
    Hypervisor,
    DesktopWeight,
    Signal,
    SignalValue,
    HardwareFacts,
    HardwareClassification,
    VirtualizationClassification,
    Profile,
)

from .confidence import (
    ConfidenceTier,
    tier_for_score,
    HIGH_CONFIDENCE_SCORE,
    MEDIUM_CONFIDENCE_SCORE,
)

from .errors import (
    HwProfileError,
    InformationUnavailableError,
    ReportParseError,
    ConfigError,
)

__all__ = [
    # Structures
    'Category',
    'CATEGORY_PRIORITY',
    'Hypervisor',
    'DesktopWeight',
    'Signal',
    'SignalValue',
    'HardwareFacts',
    'HardwareClassification',
    'VirtualizationClassification',
    'Profile',
    # Confidence
    'ConfidenceTier',
    'tier_for_score',
    'HIGH_CONFIDENCE_SCORE',
    'MEDIUM_CONFIDENCE_SCORE',
    # Errors
    'HwProfileError',
    'InformationUnavailableError',
    'ReportParseError',
    'ConfigError',
]
