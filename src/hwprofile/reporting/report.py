"""
Report Exporter

Serializes classification results for the configuration generators that
consume them, and for humans.

Supports:
- Key/value: one KEY=value fact per line, stable key names (the contract
  with downstream configuration generators)
- Text: human-readable summary
- JSON: machine-readable, same content as key/value

The key/value format round-trips: parse_kv_report(generate_kv_report(r))
recovers identical HardwareClassification, VirtualizationClassification
and Profile values.

Usage:
    from hwprofile.reporting import DetectionReport, ReportGenerator

    report = DetectionReport(hardware, virtualization, profile)
    generator = ReportGenerator()
    print(generator.generate_text_report(report))
    print(generator.generate_kv_report(report))
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..classification.rules import RULES_VERSION
from ..classification.virtualization import MARKERS_VERSION
from ..core.confidence import ConfidenceTier
from ..core.errors import ReportParseError
from ..core.structures import (
    Category,
    CATEGORY_PRIORITY,
    DesktopWeight,
    HardwareClassification,
    HardwareFacts,
    Hypervisor,
    Profile,
    Signal,
    VirtualizationClassification,
)
from ..recommendation.mapper import guest_guidance


UNKNOWN = "unknown"

_KV_LINE = re.compile(r'^([A-Z][A-Z0-9_]*)=(.*)$')


@dataclass(frozen=True)
class DetectionReport:
    """Everything a run produced; any part may be absent (e.g. `vm` command)."""
    hardware: Optional[HardwareClassification] = None
    virtualization: Optional[VirtualizationClassification] = None
    profile: Optional[Profile] = None


# =============================================================================
# Value encoding
# =============================================================================

def _fmt_bool(value: Optional[bool]) -> str:
    if value is None:
        return UNKNOWN
    return "true" if value else "false"


def _fmt_int(value: Optional[int]) -> str:
    return UNKNOWN if value is None else str(value)


def _parse_bool(key: str, raw: str) -> Optional[bool]:
    if raw == UNKNOWN:
        return None
    if raw in ("true", "false"):
        return raw == "true"
    raise ReportParseError(f"{key}: expected true/false/unknown, got {raw!r}")


def _parse_int(key: str, raw: str, allow_unknown: bool = True) -> Optional[int]:
    if allow_unknown and raw == UNKNOWN:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ReportParseError(f"{key}: expected an integer, got {raw!r}") from None


def _parse_enum(key: str, raw: str, enum_type):
    try:
        return enum_type(raw)
    except ValueError:
        raise ReportParseError(f"{key}: unexpected value {raw!r}") from None


def _encode_evidence(signal: Signal, points: int) -> str:
    value = list(signal.value) if isinstance(signal.value, tuple) else signal.value
    return json.dumps({
        "points": points,
        "signal": signal.name,
        "value": value,
        "confidence": signal.source_confidence.value,
        "detail": signal.detail,
    }, sort_keys=True)


def _decode_evidence(key: str, raw: str) -> Tuple[Signal, int]:
    try:
        data = json.loads(raw)
        value = data["value"]
        if isinstance(value, list):
            value = tuple(value)
        signal = Signal.of(
            data["signal"], value,
            ConfidenceTier(data["confidence"]),
            data.get("detail", ""),
        )
        return signal, int(data["points"])
    except (ValueError, KeyError, TypeError) as e:
        raise ReportParseError(f"{key}: malformed evidence entry ({e})") from None


# =============================================================================
# Generator
# =============================================================================

class ReportGenerator:
    """
    Report generation from classification results.

    Output is deterministic: keys are always emitted in the same order and
    nothing depends on dict iteration of runtime data.
    """

    def __init__(self, width: int = 60):
        self.width = width

    # -------------------------------------------------------------------------
    # Key/value
    # -------------------------------------------------------------------------

    def generate_kv_pairs(self, report: DetectionReport) -> List[Tuple[str, str]]:
        """Ordered (KEY, value) pairs for a report."""
        pairs: List[Tuple[str, str]] = []

        hw = report.hardware
        if hw is not None:
            pairs += [
                ("HARDWARE_TYPE", hw.category.value),
                ("CONFIDENCE_LEVEL", hw.confidence_tier.value),
                ("CONFIDENCE_SCORE", str(hw.winning_score)),
                ("HAS_BATTERY", _fmt_bool(hw.facts.has_battery)),
                ("HAS_WIRELESS", _fmt_bool(hw.facts.has_wireless)),
                ("CPU_CORES", _fmt_int(hw.facts.cpu_cores)),
                ("MEMORY_GB", _fmt_int(hw.facts.memory_gb)),
            ]
            for category in CATEGORY_PRIORITY:
                pairs.append((f"SCORE_{category.name}", str(hw.score_for(category))))
            pairs.append(("EVIDENCE_COUNT", str(len(hw.contributing_signals))))
            for i, (signal, points) in enumerate(hw.contributing_signals, 1):
                pairs.append((f"EVIDENCE_{i}", _encode_evidence(signal, points)))
            pairs.append(("RULES_VERSION", RULES_VERSION))

        vm = report.virtualization
        if vm is not None:
            pairs += [
                ("VM_TYPE", vm.hypervisor.value),
                ("CONFIDENCE", vm.confidence_tier.value),
                ("VM_DETECTION_METHOD", vm.detection_method),
                ("MARKERS_VERSION", MARKERS_VERSION),
            ]

        profile = report.profile
        if profile is not None:
            pairs += [
                ("POWER_PROFILE", profile.power_profile),
                ("DESKTOP_WEIGHT", profile.desktop_weight.value),
                ("BUILD_PARALLELISM", str(profile.build_parallelism)),
                ("CPU_GOVERNOR", profile.cpu_governor),
                ("PROFILE_RATIONALE_COUNT", str(len(profile.rationale))),
            ]
            for i, line in enumerate(profile.rationale, 1):
                pairs.append((f"PROFILE_RATIONALE_{i}", line))

        return pairs

    def generate_kv_report(self, report: DetectionReport) -> str:
        """One KEY=value line per fact."""
        return "\n".join(f"{key}={value}" for key, value in self.generate_kv_pairs(report))

    # -------------------------------------------------------------------------
    # JSON
    # -------------------------------------------------------------------------

    def generate_json_report(self, report: DetectionReport, pretty_print: bool = True) -> str:
        """JSON object keyed like the key/value report, evidence decoded."""
        data: Dict[str, Any] = {}
        for key, value in self.generate_kv_pairs(report):
            if key.startswith("EVIDENCE_") and key != "EVIDENCE_COUNT":
                data.setdefault("EVIDENCE", []).append(json.loads(value))
            elif key.startswith("PROFILE_RATIONALE_") and key != "PROFILE_RATIONALE_COUNT":
                data.setdefault("PROFILE_RATIONALE", []).append(value)
            elif key not in ("EVIDENCE_COUNT", "PROFILE_RATIONALE_COUNT"):
                data[key] = value
        return json.dumps(data, indent=2 if pretty_print else None)

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def generate_text_report(self, report: DetectionReport) -> str:
        """Human-readable summary."""
        lines = []
        width = self.width

        lines.append("=" * width)
        lines.append("HARDWARE CLASSIFICATION")
        lines.append("=" * width)
        lines.append("")

        hw = report.hardware
        if hw is not None:
            lines.append("HARDWARE")
            lines.append("-" * width)
            lines.append(f"Type:                    {hw.category.value}")
            lines.append(f"Confidence:              {hw.confidence_tier.value} ({hw.winning_score} points)")
            lines.append(f"Battery:                 {_fmt_bool(hw.facts.has_battery)}")
            lines.append(f"Wireless:                {_fmt_bool(hw.facts.has_wireless)}")
            lines.append(f"CPU Cores:               {_fmt_int(hw.facts.cpu_cores)}")
            lines.append(f"Memory:                  {_fmt_int(hw.facts.memory_gb)} GB")
            lines.append("")
            lines.append("Scores:")
            for category in CATEGORY_PRIORITY:
                marker = "✓" if category is hw.category else " "
                lines.append(f"  {marker} {category.value.title():<14s} {hw.score_for(category):>4d}")
            if hw.contributing_signals:
                lines.append("")
                lines.append("Evidence:")
                for signal, points in hw.contributing_signals:
                    lines.append(f"  +{points:<3d} {signal}")
            if hw.confidence_tier is ConfidenceTier.LOW:
                lines.append("")
                lines.append("  ⚠ Low confidence: confirm the hardware type before applying")
            lines.append("")

        vm = report.virtualization
        if vm is not None:
            lines.append("VIRTUALIZATION")
            lines.append("-" * width)
            if vm.is_guest:
                lines.append(f"Hypervisor:              {vm.hypervisor.value} ({vm.confidence_tier.value} confidence)")
            else:
                lines.append("Hypervisor:              none (physical hardware)")
            lines.append(f"Detection Method:        {vm.detection_method}")
            lines.append("")

        profile = report.profile
        if profile is not None:
            lines.append("RECOMMENDATIONS")
            lines.append("-" * width)
            lines.append(f"Power Profile:           {profile.power_profile}")
            lines.append(f"CPU Governor:            {profile.cpu_governor}")
            lines.append(f"Desktop Weight:          {profile.desktop_weight.value}")
            lines.append(f"Build Parallelism:       {profile.build_parallelism}")
            for i, line in enumerate(profile.rationale, 1):
                lines.append(f"  {i}. {line}")
            lines.append("")

        if vm is not None and vm.is_guest:
            lines.append("GUEST SETUP")
            lines.append("-" * width)
            for tip in guest_guidance(vm.hypervisor):
                lines.append(f"  - {tip}")
            lines.append("")

        return "\n".join(lines)


# =============================================================================
# Parsing
# =============================================================================

def _parse_pairs(text: str) -> Dict[str, str]:
    pairs = {}
    for line in text.splitlines():
        match = _KV_LINE.match(line.rstrip('\r'))
        if match:
            pairs[match.group(1)] = match.group(2)
    return pairs


def _require(pairs: Dict[str, str], key: str) -> str:
    if key not in pairs:
        raise ReportParseError(f"missing key {key}")
    return pairs[key]


def _parse_hardware(pairs: Dict[str, str]) -> HardwareClassification:
    category = _parse_enum("HARDWARE_TYPE", pairs["HARDWARE_TYPE"], Category)
    tier = _parse_enum("CONFIDENCE_LEVEL", _require(pairs, "CONFIDENCE_LEVEL"), ConfidenceTier)
    score = _parse_int("CONFIDENCE_SCORE", _require(pairs, "CONFIDENCE_SCORE"), allow_unknown=False)

    facts = HardwareFacts(
        has_battery=_parse_bool("HAS_BATTERY", _require(pairs, "HAS_BATTERY")),
        has_wireless=_parse_bool("HAS_WIRELESS", _require(pairs, "HAS_WIRELESS")),
        cpu_cores=_parse_int("CPU_CORES", _require(pairs, "CPU_CORES")),
        memory_gb=_parse_int("MEMORY_GB", _require(pairs, "MEMORY_GB")),
    )

    scores = {}
    for c in CATEGORY_PRIORITY:
        key = f"SCORE_{c.name}"
        scores[c] = _parse_int(key, pairs[key], allow_unknown=False) if key in pairs else 0
    if "SCORE_DESKTOP" not in pairs:
        # Minimal reports (only the downstream contract keys)
        scores[category] = score

    count = _parse_int("EVIDENCE_COUNT", pairs.get("EVIDENCE_COUNT", "0"), allow_unknown=False)
    evidence = tuple(
        _decode_evidence(f"EVIDENCE_{i}", _require(pairs, f"EVIDENCE_{i}"))
        for i in range(1, count + 1)
    )

    return HardwareClassification(
        category=category,
        winning_score=score,
        confidence_tier=tier,
        contributing_signals=evidence,
        scores=scores,
        facts=facts,
    )


def _parse_virtualization(pairs: Dict[str, str]) -> VirtualizationClassification:
    return VirtualizationClassification(
        hypervisor=_parse_enum("VM_TYPE", pairs["VM_TYPE"], Hypervisor),
        confidence_tier=_parse_enum("CONFIDENCE", _require(pairs, "CONFIDENCE"), ConfidenceTier),
        detection_method=pairs.get("VM_DETECTION_METHOD", ""),
    )


def _parse_profile(pairs: Dict[str, str]) -> Profile:
    count = _parse_int("PROFILE_RATIONALE_COUNT", pairs.get("PROFILE_RATIONALE_COUNT", "0"),
                       allow_unknown=False)
    return Profile(
        power_profile=pairs["POWER_PROFILE"],
        desktop_weight=_parse_enum("DESKTOP_WEIGHT", _require(pairs, "DESKTOP_WEIGHT"), DesktopWeight),
        build_parallelism=_parse_int("BUILD_PARALLELISM", _require(pairs, "BUILD_PARALLELISM"),
                                     allow_unknown=False),
        cpu_governor=_require(pairs, "CPU_GOVERNOR"),
        rationale=tuple(_require(pairs, f"PROFILE_RATIONALE_{i}") for i in range(1, count + 1)),
    )


def parse_kv_report(text: str) -> DetectionReport:
    """
    Parse a key/value report back into result objects.

    Lines that are not KEY=value (e.g. a human-readable summary printed
    before the key/value block) are ignored. A section is parsed when its
    leading key (HARDWARE_TYPE, VM_TYPE, POWER_PROFILE) is present.

    Raises:
        ReportParseError: on missing or malformed keys in a present section
    """
    pairs = _parse_pairs(text)
    if not any(key in pairs for key in ("HARDWARE_TYPE", "VM_TYPE", "POWER_PROFILE")):
        raise ReportParseError("no HARDWARE_TYPE, VM_TYPE or POWER_PROFILE key found")

    return DetectionReport(
        hardware=_parse_hardware(pairs) if "HARDWARE_TYPE" in pairs else None,
        virtualization=_parse_virtualization(pairs) if "VM_TYPE" in pairs else None,
        profile=_parse_profile(pairs) if "POWER_PROFILE" in pairs else None,
    )
