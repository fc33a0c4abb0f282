"""
Core Data Structures

Immutable value types shared by the probes, the classifiers, the
recommendation mapper and the report exporter.

Each classification run owns its own signals and results; nothing here is
cached or shared across runs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .confidence import ConfidenceTier


SignalValue = Union[bool, int, str, Tuple[str, ...], None]


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Category(Enum):
    """Hardware category of the host machine."""
    LAPTOP = "laptop"
    DESKTOP = "desktop"
    WORKSTATION = "workstation"
    SERVER = "server"


# Tie-break priority: earlier wins. Desktop is the least destructive guess
# for downstream power and optimization settings.
CATEGORY_PRIORITY: Tuple[Category, ...] = (
    Category.DESKTOP,
    Category.LAPTOP,
    Category.WORKSTATION,
    Category.SERVER,
)


class Hypervisor(Enum):
    """Virtualization host the machine runs under (NONE = bare metal)."""
    NONE = "none"
    QEMU = "qemu"
    VIRTUALBOX = "virtualbox"
    VMWARE = "vmware"
    HYPERV = "hyperv"
    XEN = "xen"
    UNKNOWN = "unknown"

    @property
    def is_guest(self) -> bool:
        return self is not Hypervisor.NONE


class DesktopWeight(Enum):
    """How heavy a desktop environment the machine can comfortably carry."""
    MINIMAL = "minimal"
    BALANCED = "balanced"
    FULL = "full"


# =============================================================================
# SIGNALS
# =============================================================================

@dataclass(frozen=True)
class Signal:
    """
    One atomic piece of evidence about the host machine.

    Attributes:
        name: Probe name that produced the signal (e.g. "battery_count")
        value: Observed value; tuples carry class lists such as
            ("wired", "wireless"). None when unavailable.
        source_confidence: How much the source itself can be trusted
        available: False if the source could not be read. Distinct from a
            value that reports absence (0, False, empty tuple).
        detail: Where the value came from, for diagnostics only
    """
    name: str
    value: SignalValue
    source_confidence: ConfidenceTier = ConfidenceTier.MEDIUM
    available: bool = True
    detail: str = ""

    @classmethod
    def of(
        cls,
        name: str,
        value: SignalValue,
        confidence: ConfidenceTier = ConfidenceTier.MEDIUM,
        detail: str = ""
    ) -> 'Signal':
        """Create an available signal."""
        return cls(name=name, value=value, source_confidence=confidence,
                   available=True, detail=detail)

    @classmethod
    def unavailable(cls, name: str, detail: str = "") -> 'Signal':
        """Create a signal for a source that could not be read."""
        return cls(name=name, value=None, source_confidence=ConfidenceTier.LOW,
                   available=False, detail=detail)

    def __str__(self) -> str:
        if not self.available:
            return f"{self.name}: unavailable"
        value = self.value
        if isinstance(value, tuple):
            value = ", ".join(value) if value else "(none)"
        return f"{self.name}: {value}"


# =============================================================================
# CLASSIFICATION RESULTS
# =============================================================================

@dataclass(frozen=True)
class HardwareFacts:
    """
    Headline facts carried alongside the hardware classification.

    None means the underlying probe was unavailable.
    """
    has_battery: Optional[bool] = None
    has_wireless: Optional[bool] = None
    cpu_cores: Optional[int] = None
    memory_gb: Optional[int] = None


@dataclass(frozen=True)
class HardwareClassification:
    """Result of folding evidence rules over the collected signals."""
    category: Category
    winning_score: int
    confidence_tier: ConfidenceTier
    contributing_signals: Tuple[Tuple[Signal, int], ...] = ()
    scores: Dict[Category, int] = field(default_factory=dict)
    facts: HardwareFacts = field(default_factory=HardwareFacts)

    def score_for(self, category: Category) -> int:
        return self.scores.get(category, 0)


@dataclass(frozen=True)
class VirtualizationClassification:
    """Terminal result of the virtualization detection cascade."""
    hypervisor: Hypervisor
    confidence_tier: ConfidenceTier
    detection_method: str

    @classmethod
    def bare_metal(cls) -> 'VirtualizationClassification':
        """No virtualization signal fired: strong evidence of physical hardware."""
        return cls(
            hypervisor=Hypervisor.NONE,
            confidence_tier=ConfidenceTier.HIGH,
            detection_method="no virtualization signals",
        )

    @property
    def is_guest(self) -> bool:
        return self.hypervisor.is_guest


@dataclass(frozen=True)
class Profile:
    """Configuration recommendation derived from both classifications."""
    power_profile: str
    desktop_weight: DesktopWeight
    build_parallelism: int
    cpu_governor: str
    rationale: Tuple[str, ...] = ()
