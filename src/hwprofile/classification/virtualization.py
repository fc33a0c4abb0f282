"""
Virtualization Classifier

An ordered cascade of detection stages, each a pure function from the
collected signals to an optional VirtualizationClassification. The cascade
halts at the first stage that produces a result at or above the minimum
confidence; later stages can never change that answer.

Stages, most authoritative first:
1. kernel_virt_type     - systemd-detect-virt --vm            (high)
2. dmi_product_name     - hypervisor markers in product name  (marker tier)
3. dmi_sys_vendor       - hypervisor markers in system vendor (marker tier)
4. cpu_hypervisor_flag  - generic "under a hypervisor" bit    (unknown, medium)
5. device_signature     - PCI vendor IDs, then guest modules  (medium)

If stages fired but none reached the minimum confidence, the best of them
(highest tier, earliest stage on ties) is reported at low confidence.
If nothing fires at all the machine is bare metal at high confidence:
absence of every virtualization signal is itself strong evidence.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple

from ..core.confidence import ConfidenceTier
from ..core.structures import Hypervisor, Signal, VirtualizationClassification
from ..logging import DetectionLogger, get_logger


MARKERS_VERSION = "1"

HIGH = ConfidenceTier.HIGH
MEDIUM = ConfidenceTier.MEDIUM


@dataclass(frozen=True)
class HypervisorMarker:
    """Case-insensitive substring identifying a hypervisor in DMI text."""
    text: str
    hypervisor: Hypervisor
    tier: ConfidenceTier = HIGH

    def matches(self, value: str) -> bool:
        return self.text.lower() in value.lower()


# Markers shared by product name and system vendor
DMI_MARKERS: Tuple[HypervisorMarker, ...] = (
    HypervisorMarker("VirtualBox", Hypervisor.VIRTUALBOX),
    HypervisorMarker("VMware", Hypervisor.VMWARE),
    HypervisorMarker("QEMU", Hypervisor.QEMU),
    HypervisorMarker("KVM", Hypervisor.QEMU),
    HypervisorMarker("Bochs", Hypervisor.QEMU),
    # Surface hardware reports the same vendor string as Hyper-V guests
    HypervisorMarker("Microsoft Corporation", Hypervisor.HYPERV, MEDIUM),
    HypervisorMarker("HVM domU", Hypervisor.XEN),
    HypervisorMarker("Xen", Hypervisor.XEN),
)

# Vendor strings that only make sense as a system vendor
VENDOR_MARKERS: Tuple[HypervisorMarker, ...] = DMI_MARKERS + (
    HypervisorMarker("innotek", Hypervisor.VIRTUALBOX),
    HypervisorMarker("Oracle", Hypervisor.VIRTUALBOX),
)

# systemd-detect-virt identifiers
KERNEL_VIRT_IDS: Dict[str, Hypervisor] = {
    'qemu': Hypervisor.QEMU,
    'kvm': Hypervisor.QEMU,
    'bochs': Hypervisor.QEMU,
    'oracle': Hypervisor.VIRTUALBOX,
    'vmware': Hypervisor.VMWARE,
    'microsoft': Hypervisor.HYPERV,
    'xen': Hypervisor.XEN,
}

# PCI vendor IDs of paravirtual/emulated devices, checked in order
PCI_VENDOR_SIGNATURES: Tuple[Tuple[str, Hypervisor], ...] = (
    ('80ee', Hypervisor.VIRTUALBOX),   # InnoTek (VirtualBox)
    ('15ad', Hypervisor.VMWARE),       # VMware
    ('1414', Hypervisor.HYPERV),       # Microsoft
    ('5853', Hypervisor.XEN),          # XenSource
    ('1af4', Hypervisor.QEMU),         # Red Hat virtio
    ('1b36', Hypervisor.QEMU),         # Red Hat QEMU devices
)

# Guest-side kernel modules, checked in order
GUEST_MODULE_SIGNATURES: Tuple[Tuple[Tuple[str, ...], Hypervisor], ...] = (
    (('vboxguest', 'vboxsf', 'vboxvideo'), Hypervisor.VIRTUALBOX),
    (('vmw_balloon', 'vmw_pvscsi', 'vmxnet3', 'vmwgfx'), Hypervisor.VMWARE),
    (('hv_vmbus', 'hv_balloon', 'hv_storvsc', 'hv_netvsc', 'hyperv_fb'), Hypervisor.HYPERV),
    (('xen_blkfront', 'xen_netfront', 'xen_fbfront'), Hypervisor.XEN),
    (('virtio_balloon', 'virtio_blk', 'virtio_net', 'virtio_scsi',
      'virtio_console', 'virtio_gpu', 'qemu_fw_cfg'), Hypervisor.QEMU),
)


SignalMap = Mapping[str, Signal]
StageResult = Optional[VirtualizationClassification]


@dataclass(frozen=True)
class DetectionStage:
    """One step of the virtualization cascade."""
    name: str
    detect: Callable[[SignalMap], StageResult]


def _value(signals: SignalMap, name: str):
    signal = signals.get(name)
    if signal is None or not signal.available:
        return None
    return signal.value


def _result(hypervisor: Hypervisor, tier: ConfidenceTier, stage: str, detail: str) -> VirtualizationClassification:
    return VirtualizationClassification(
        hypervisor=hypervisor,
        confidence_tier=tier,
        detection_method=f"{stage}: {detail}",
    )


# =============================================================================
# Stages
# =============================================================================

def detect_kernel_virt_type(signals: SignalMap) -> StageResult:
    value = _value(signals, 'kernel_virt_type')
    if not value or value == 'none':
        return None
    hypervisor = KERNEL_VIRT_IDS.get(value, Hypervisor.UNKNOWN)
    return _result(hypervisor, HIGH, 'kernel_virt_type', f"systemd-detect-virt reported {value}")


def _match_markers(value: Optional[str], markers: Sequence[HypervisorMarker]) -> Optional[HypervisorMarker]:
    if not value:
        return None
    for marker in markers:
        if marker.matches(value):
            return marker
    return None


def detect_dmi_product_name(signals: SignalMap) -> StageResult:
    value = _value(signals, 'product_name')
    marker = _match_markers(value, DMI_MARKERS)
    if marker is None:
        return None
    return _result(marker.hypervisor, marker.tier, 'dmi_product_name', f"DMI product name {value!r}")


def detect_dmi_sys_vendor(signals: SignalMap) -> StageResult:
    value = _value(signals, 'sys_vendor')
    marker = _match_markers(value, VENDOR_MARKERS)
    if marker is None:
        return None
    return _result(marker.hypervisor, marker.tier, 'dmi_sys_vendor', f"DMI system vendor {value!r}")


def detect_cpu_hypervisor_flag(signals: SignalMap) -> StageResult:
    if _value(signals, 'cpu_hypervisor_flag') is not True:
        return None
    return _result(Hypervisor.UNKNOWN, MEDIUM, 'cpu_hypervisor_flag', "hypervisor CPU flag set")


def detect_device_signature(signals: SignalMap) -> StageResult:
    vendors = _value(signals, 'pci_vendor_ids') or ()
    for vendor_id, hypervisor in PCI_VENDOR_SIGNATURES:
        if vendor_id in vendors:
            return _result(hypervisor, MEDIUM, 'device_signature', f"PCI vendor {vendor_id}")

    modules = _value(signals, 'kernel_modules') or ()
    for names, hypervisor in GUEST_MODULE_SIGNATURES:
        loaded = [name for name in names if name in modules]
        if loaded:
            return _result(hypervisor, MEDIUM, 'device_signature', f"guest modules {', '.join(loaded)}")
    return None


DEFAULT_STAGES: Tuple[DetectionStage, ...] = (
    DetectionStage('kernel_virt_type', detect_kernel_virt_type),
    DetectionStage('dmi_product_name', detect_dmi_product_name),
    DetectionStage('dmi_sys_vendor', detect_dmi_sys_vendor),
    DetectionStage('cpu_hypervisor_flag', detect_cpu_hypervisor_flag),
    DetectionStage('device_signature', detect_device_signature),
)


class VirtualizationClassifier:
    """
    Runs the detection cascade.

    Args:
        stages: Ordered stages (default: DEFAULT_STAGES)
        min_confidence: Stage results below this tier do not stop the
            cascade; the best of them is the low-confidence fallback
    """

    def __init__(
        self,
        stages: Sequence[DetectionStage] = DEFAULT_STAGES,
        min_confidence: ConfidenceTier = ConfidenceTier.LOW,
    ):
        self.stages = tuple(stages)
        self.min_confidence = min_confidence

    def classify(
        self,
        signals: Sequence[Signal],
        logger: Optional[DetectionLogger] = None,
    ) -> VirtualizationClassification:
        log = logger or get_logger()
        by_name = {signal.name: signal for signal in signals}

        best_partial: Optional[VirtualizationClassification] = None

        log.section("Virtualization cascade")
        for stage in self.stages:
            result = stage.detect(by_name)
            if result is None:
                log.debug(f"  {stage.name}: no match")
                continue
            if not result.confidence_tier.at_least(self.min_confidence):
                log.debug(f"  {stage.name}: {result.hypervisor.value} below minimum confidence, continuing")
                if best_partial is None or result.confidence_tier.rank > best_partial.confidence_tier.rank:
                    best_partial = result
                continue
            log.debug(f"  {stage.name}: {result.hypervisor.value} ({result.confidence_tier.value})")
            return result

        if best_partial is not None:
            log.warning(f"Virtualization evidence below {self.min_confidence.value} confidence: "
                        f"reporting {best_partial.hypervisor.value} at low confidence")
            return VirtualizationClassification(
                hypervisor=best_partial.hypervisor,
                confidence_tier=ConfidenceTier.LOW,
                detection_method=f"{best_partial.detection_method} "
                                 f"(below minimum {self.min_confidence.value} confidence)",
            )

        return VirtualizationClassification.bare_metal()


def classify_virtualization(
    signals: Sequence[Signal],
    min_confidence: ConfidenceTier = ConfidenceTier.LOW,
) -> VirtualizationClassification:
    """Convenience wrapper around VirtualizationClassifier().classify()."""
    return VirtualizationClassifier(min_confidence=min_confidence).classify(signals)
