"""
Classification Engine

Evidence rules, the hardware classifier and the virtualization cascade.
"""

from .rules import (
    EvidenceRule,
    EVIDENCE_RULES,
    RULES_VERSION,
    derive_signals,
    compute_tier,
    rules_for,
)
from .hardware import (
    CategoryScoreboard,
    Contribution,
    HardwareClassifier,
    classify_hardware,
    fold_evidence,
    extract_facts,
)
from .virtualization import (
    DetectionStage,
    HypervisorMarker,
    VirtualizationClassifier,
    classify_virtualization,
    DEFAULT_STAGES,
    DMI_MARKERS,
    VENDOR_MARKERS,
    MARKERS_VERSION,
)

__all__ = [
    # Rules
    'EvidenceRule',
    'EVIDENCE_RULES',
    'RULES_VERSION',
    'derive_signals',
    'compute_tier',
    'rules_for',
    # Hardware
    'CategoryScoreboard',
    'Contribution',
    'HardwareClassifier',
    'classify_hardware',
    'fold_evidence',
    'extract_facts',
    # Virtualization
    'DetectionStage',
    'HypervisorMarker',
    'VirtualizationClassifier',
    'classify_virtualization',
    'DEFAULT_STAGES',
    'DMI_MARKERS',
    'VENDOR_MARKERS',
    'MARKERS_VERSION',
]
