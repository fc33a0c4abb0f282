"""
Evidence Rules

Static table mapping (probe, observed value pattern) to a (category, points)
contribution. Rules are pure data and independent of each other: adding a
marker or re-weighting a rule never touches classifier control flow.

The table is versioned; bump RULES_VERSION when points or patterns change so
that reports produced by different rule sets can be told apart.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ..core.confidence import ConfidenceTier
from ..core.structures import Category, Signal


RULES_VERSION = "2"


@dataclass(frozen=True)
class EvidenceRule:
    """
    One evidence contribution.

    Attributes:
        probe_name: Signal name the rule applies to
        description: Human-readable reason, shown in reports
        match: Predicate over an available signal of that name
        category: Category that receives the points
        points: Points added when the predicate holds
    """
    probe_name: str
    description: str
    match: Callable[[Signal], bool]
    category: Category
    points: int

    def applies_to(self, signal: Signal) -> bool:
        return (signal.available
                and signal.name == self.probe_name
                and bool(self.match(signal)))


# =============================================================================
# Predicate builders
# =============================================================================

def _value_in(*values) -> Callable[[Signal], bool]:
    accepted = frozenset(values)
    return lambda signal: signal.value in accepted


def _pattern(regex: str) -> Callable[[Signal], bool]:
    compiled = re.compile(regex, re.IGNORECASE)
    return lambda signal: bool(compiled.search(str(signal.value)))


def _between(low: int, high: Optional[int] = None) -> Callable[[Signal], bool]:
    return lambda signal: signal.value >= low and (high is None or signal.value <= high)


def _contains(*items: str) -> Callable[[Signal], bool]:
    return lambda signal: any(item in signal.value for item in items)


def _count(item: str, low: int, high: Optional[int] = None) -> Callable[[Signal], bool]:
    def predicate(signal: Signal) -> bool:
        n = signal.value.count(item)
        return n >= low and (high is None or n <= high)
    return predicate


# =============================================================================
# Marker tables
# =============================================================================

LAPTOP_CHASSIS = ("Portable", "Laptop", "Notebook", "Sub Notebook", "Convertible", "Detachable")
DESKTOP_CHASSIS = ("Desktop", "Low Profile Desktop", "Mini Tower", "Tower")
SERVER_CHASSIS = ("Main Server Chassis", "Rack Mount Chassis")

BUILTIN_PANEL_CONNECTORS = ("eDP", "LVDS", "DSI")

PRODUCT_MARKERS = (
    (Category.LAPTOP, r"laptop|notebook|thinkpad|elitebook|pavilion.*laptop|inspiron.*laptop", 20),
    (Category.SERVER, r"server|poweredge|proliant|system x", 25),
    (Category.WORKSTATION, r"workstation|precision|z\d+ workstation", 25),
    (Category.DESKTOP, r"desktop|optiplex|vostro.*desktop|inspiron.*desktop", 20),
)


# =============================================================================
# Rule table
# =============================================================================

EVIDENCE_RULES: Tuple[EvidenceRule, ...] = (
    # Chassis
    EvidenceRule('chassis_type', "portable chassis", _value_in(*LAPTOP_CHASSIS), Category.LAPTOP, 30),
    EvidenceRule('chassis_type', "desktop chassis", _value_in(*DESKTOP_CHASSIS), Category.DESKTOP, 30),
    EvidenceRule('chassis_type', "server chassis", _value_in(*SERVER_CHASSIS), Category.SERVER, 30),
    EvidenceRule('chassis_type', "all-in-one chassis", _value_in("All in One"), Category.DESKTOP, 25),

    # Product name
    *(EvidenceRule('product_name', f"{category.value} product name", _pattern(regex), category, points)
      for category, regex, points in PRODUCT_MARKERS),

    # Battery (UPS-backed servers can report several)
    EvidenceRule('battery_count', "one or two batteries", _between(1, 2), Category.LAPTOP, 25),
    EvidenceRule('battery_count', "more than two batteries", _between(3), Category.SERVER, 10),
    EvidenceRule('battery_count', "no battery", _value_in(0), Category.DESKTOP, 15),
    EvidenceRule('battery_count', "no battery", _value_in(0), Category.SERVER, 10),

    # Displays
    EvidenceRule('display_connectors', "built-in panel connector",
                 _contains(*BUILTIN_PANEL_CONNECTORS), Category.LAPTOP, 20),
    EvidenceRule('connected_displays', "multiple connected displays", _between(2), Category.DESKTOP, 10),
    EvidenceRule('connected_displays', "multiple connected displays", _between(2), Category.WORKSTATION, 15),
    EvidenceRule('connected_displays', "headless", _value_in(0), Category.SERVER, 15),

    # Network
    EvidenceRule('network_interfaces', "wireless interface", _contains('wireless'), Category.LAPTOP, 20),
    EvidenceRule('network_interfaces', "multiple wired interfaces", _count('wired', 2), Category.SERVER, 15),
    EvidenceRule('network_interfaces', "multiple wired interfaces", _count('wired', 2), Category.WORKSTATION, 10),
    EvidenceRule('network_interfaces', "single wired interface only",
                 lambda s: s.value.count('wired') == 1 and 'wireless' not in s.value, Category.DESKTOP, 10),
    EvidenceRule('network_interfaces', "single wired interface only",
                 lambda s: s.value.count('wired') == 1 and 'wireless' not in s.value, Category.SERVER, 5),

    # Audio
    EvidenceRule('audio_devices', "capture device", _contains('capture'), Category.LAPTOP, 10),
    EvidenceRule('audio_devices', "no audio hardware", lambda s: not s.value, Category.SERVER, 10),

    # USB peripherals
    EvidenceRule('usb_peripherals', "external keyboard or mouse", _contains('keyboard', 'mouse'), Category.DESKTOP, 5),
    EvidenceRule('usb_peripherals', "external keyboard or mouse", _contains('keyboard', 'mouse'), Category.WORKSTATION, 5),
    EvidenceRule('usb_peripherals', "webcam", _contains('webcam'), Category.LAPTOP, 10),
    EvidenceRule('usb_peripherals', "webcam", _contains('webcam'), Category.WORKSTATION, 5),

    # CPU and memory (derived)
    EvidenceRule('compute_tier', "high-end CPU/memory", _value_in('high_end'), Category.SERVER, 15),
    EvidenceRule('compute_tier', "high-end CPU/memory", _value_in('high_end'), Category.WORKSTATION, 20),
    EvidenceRule('compute_tier', "mid-range CPU/memory", _value_in('mid_range'), Category.DESKTOP, 10),
    EvidenceRule('compute_tier', "mid-range CPU/memory", _value_in('mid_range'), Category.WORKSTATION, 15),
    EvidenceRule('compute_tier', "low-end CPU/memory", _value_in('low_end'), Category.LAPTOP, 5),
)


# =============================================================================
# Derived signals
# =============================================================================

def _find(signals: Sequence[Signal], name: str) -> Optional[Signal]:
    for signal in signals:
        if signal.name == name:
            return signal
    return None


def compute_tier(cores: Optional[int], memory_gb: Optional[int]) -> Optional[str]:
    """
    Bucket CPU cores and memory together.

    Returns:
        "high_end", "mid_range", "low_end", "standard", or None if both
        inputs are unknown
    """
    if cores is None and memory_gb is None:
        return None
    c = cores or 0
    m = memory_gb or 0
    if c >= 16 or m >= 32:
        return 'high_end'
    if c >= 8 or m >= 16:
        return 'mid_range'
    if cores is not None and memory_gb is not None and c <= 4 and m <= 8:
        return 'low_end'
    return 'standard'


def derive_signals(signals: Sequence[Signal]) -> Tuple[Signal, ...]:
    """
    Append signals computed from several probes.

    Currently only ``compute_tier``, which needs cpu_cores and memory_gb
    together. Input signals are returned unchanged and in order.
    """
    cores = _find(signals, 'cpu_cores')
    memory = _find(signals, 'memory_gb')
    core_value = cores.value if cores is not None and cores.available else None
    memory_value = memory.value if memory is not None and memory.available else None

    tier = compute_tier(core_value, memory_value)
    if tier is None:
        derived = Signal.unavailable('compute_tier', "cpu_cores and memory_gb unavailable")
    else:
        both = core_value is not None and memory_value is not None
        derived = Signal.of(
            'compute_tier', tier,
            ConfidenceTier.HIGH if both else ConfidenceTier.MEDIUM,
            f"{core_value if core_value is not None else '?'} cores, "
            f"{memory_value if memory_value is not None else '?'} GB"
        )
    return tuple(signals) + (derived,)


def rules_for(probe_name: str, rules: Sequence[EvidenceRule] = EVIDENCE_RULES) -> Tuple[EvidenceRule, ...]:
    return tuple(rule for rule in rules if rule.probe_name == probe_name)
