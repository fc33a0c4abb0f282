"""
Signal Probes

Independent, side-effect-free readers of one fact each. Every probe is a
total function from a SystemInfoSource to a Signal: an unreadable source
yields an unavailable signal, never an exception.

Probes have no dependencies on each other and collect_signals() may run
them concurrently; the returned tuple is always in PROBES order.

Usage:
    from hwprofile.probes import LinuxSystemSource, collect_signals

    signals = collect_signals(LinuxSystemSource())
    for signal in signals:
        print(signal)
"""

import re
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import DetectorConfig
from ..core.confidence import ConfidenceTier
from ..core.structures import Signal
from ..logging import DetectionLogger, get_logger
from .source import SystemInfoSource


HIGH = ConfidenceTier.HIGH
MEDIUM = ConfidenceTier.MEDIUM

DMI_DIR = 'sys/class/dmi/id'

# SMBIOS System Enclosure types (DMTF DSP0134, 7.4.1)
SMBIOS_CHASSIS_TYPES = {
    1: "Other",
    2: "Unknown",
    3: "Desktop",
    4: "Low Profile Desktop",
    5: "Pizza Box",
    6: "Mini Tower",
    7: "Tower",
    8: "Portable",
    9: "Laptop",
    10: "Notebook",
    11: "Hand Held",
    12: "Docking Station",
    13: "All in One",
    14: "Sub Notebook",
    15: "Space-saving",
    16: "Lunch Box",
    17: "Main Server Chassis",
    18: "Expansion Chassis",
    19: "SubChassis",
    20: "Bus Expansion Chassis",
    21: "Peripheral Chassis",
    22: "RAID Chassis",
    23: "Rack Mount Chassis",
    24: "Sealed-case PC",
    25: "Multi-system Chassis",
    26: "Compact PCI",
    27: "Advanced TCA",
    28: "Blade",
    29: "Blade Enclosure",
    30: "Tablet",
    31: "Convertible",
    32: "Detachable",
    33: "IoT Gateway",
    34: "Embedded PC",
    35: "Mini PC",
    36: "Stick PC",
}

# Interfaces that never describe physical hardware
VIRTUAL_INTERFACE_PREFIXES = ('lo', 'virbr', 'docker', 'veth', 'tun', 'tap')

_DRM_CONNECTOR = re.compile(r'^card\d+-(.+?)(?:-\d+)?$')


Probe = Callable[[SystemInfoSource], Signal]


# =============================================================================
# DMI / SMBIOS
# =============================================================================

def _read_dmi(source: SystemInfoSource, name: str, field: str) -> Signal:
    raw = source.read_text(f'{DMI_DIR}/{field}')
    if raw is None or not raw.strip():
        return Signal.unavailable(name, f"/{DMI_DIR}/{field} not readable")
    return Signal.of(name, raw.strip(), HIGH, f"/{DMI_DIR}/{field}")


def probe_chassis_type(source: SystemInfoSource) -> Signal:
    """SMBIOS chassis type, as its name ("Notebook", "Tower", ...)."""
    raw = source.read_text(f'{DMI_DIR}/chassis_type')
    if raw is None or not raw.strip():
        return Signal.unavailable('chassis_type', "DMI chassis type not readable")
    try:
        code = int(raw.strip())
    except ValueError:
        return Signal.unavailable('chassis_type', f"unparseable chassis type {raw.strip()!r}")
    name = SMBIOS_CHASSIS_TYPES.get(code, f"Unknown ({code})")
    return Signal.of('chassis_type', name, HIGH, f"SMBIOS chassis code {code}")


def probe_product_name(source: SystemInfoSource) -> Signal:
    return _read_dmi(source, 'product_name', 'product_name')


def probe_sys_vendor(source: SystemInfoSource) -> Signal:
    return _read_dmi(source, 'sys_vendor', 'sys_vendor')


# =============================================================================
# Power and display
# =============================================================================

def probe_battery_count(source: SystemInfoSource) -> Signal:
    """Number of system batteries (peripheral batteries are ignored)."""
    base = 'sys/class/power_supply'
    supplies = source.list_dir(base)
    if supplies is None:
        return Signal.unavailable('battery_count', f"/{base} missing")

    count = 0
    for supply in supplies:
        kind = (source.read_text(f'{base}/{supply}/type') or '').strip()
        if kind != 'Battery':
            continue
        # Wireless mice and headsets report scope=Device
        scope = (source.read_text(f'{base}/{supply}/scope') or '').strip()
        if scope == 'Device':
            continue
        count += 1
    return Signal.of('battery_count', count, HIGH, f"/{base}")


def _drm_connectors(source: SystemInfoSource) -> Optional[List[str]]:
    entries = source.list_dir('sys/class/drm')
    if entries is None:
        return None
    return [entry for entry in entries if _DRM_CONNECTOR.match(entry)]


def probe_display_connectors(source: SystemInfoSource) -> Signal:
    """Kinds of display connectors present (eDP, LVDS, HDMI-A, DP, ...)."""
    connectors = _drm_connectors(source)
    if connectors is None:
        return Signal.unavailable('display_connectors', "/sys/class/drm missing")
    kinds = sorted({_DRM_CONNECTOR.match(c).group(1) for c in connectors})
    return Signal.of('display_connectors', tuple(kinds), MEDIUM, "/sys/class/drm")


def probe_connected_displays(source: SystemInfoSource) -> Signal:
    connectors = _drm_connectors(source)
    if connectors is None:
        return Signal.unavailable('connected_displays', "/sys/class/drm missing")
    connected = sum(
        1 for c in connectors
        if (source.read_text(f'sys/class/drm/{c}/status') or '').strip() == 'connected'
    )
    return Signal.of('connected_displays', connected, MEDIUM, "/sys/class/drm/*/status")


# =============================================================================
# Network, audio, USB
# =============================================================================

def probe_network_interfaces(source: SystemInfoSource) -> Signal:
    """Classes ("wired"/"wireless") of physical network interfaces."""
    base = 'sys/class/net'
    interfaces = source.list_dir(base)
    if interfaces is None:
        return Signal.unavailable('network_interfaces', f"/{base} missing")

    classes = []
    for iface in interfaces:
        if iface.startswith(VIRTUAL_INTERFACE_PREFIXES):
            continue
        if source.exists(f'{base}/{iface}/wireless') or iface.startswith(('wl', 'wifi')):
            classes.append('wireless')
        elif iface.startswith(('en', 'eth')):
            classes.append('wired')
    return Signal.of('network_interfaces', tuple(sorted(classes)), HIGH, f"/{base}")


def _pactl_count(source: SystemInfoSource, kind: str) -> Optional[int]:
    result = source.run_command(['pactl', 'list', 'short', kind])
    if result is None or result.returncode != 0:
        return None
    lines = [line for line in result.stdout.splitlines() if line.strip()]
    if kind == 'sources':
        lines = [line for line in lines if 'monitor' not in line]
    return len(lines)


def probe_audio_devices(source: SystemInfoSource) -> Signal:
    """Audio device classes present: "playback" and/or "capture"."""
    sinks = _pactl_count(source, 'sinks')
    sources = _pactl_count(source, 'sources')
    if sinks is not None and sources is not None:
        classes = []
        if sinks:
            classes.append('playback')
        if sources:
            classes.append('capture')
        return Signal.of('audio_devices', tuple(sorted(classes)), MEDIUM, "pactl")

    # ALSA fallback: /proc/asound/cardN/pcmNp (playback) and pcmNc (capture)
    cards = source.list_dir('proc/asound')
    if cards is None:
        return Signal.unavailable('audio_devices', "no pactl and no /proc/asound")

    classes = set()
    for card in cards:
        if not re.match(r'^card\d+$', card):
            continue
        for entry in source.list_dir(f'proc/asound/{card}') or []:
            if re.match(r'^pcm\d+p$', entry):
                classes.add('playback')
            elif re.match(r'^pcm\d+c$', entry):
                classes.add('capture')
    return Signal.of('audio_devices', tuple(sorted(classes)), MEDIUM, "/proc/asound")


_USB_CLASSES = (
    ('keyboard', re.compile(r'keyboard', re.IGNORECASE)),
    ('mouse', re.compile(r'mouse', re.IGNORECASE)),
    ('webcam', re.compile(r'camera|webcam', re.IGNORECASE)),
)


def probe_usb_peripherals(source: SystemInfoSource) -> Signal:
    """USB peripheral classes found by lsusb (one entry per device)."""
    result = source.run_command(['lsusb'])
    if result is None:
        return Signal.unavailable('usb_peripherals', "lsusb not installed or timed out")
    if result.returncode != 0:
        return Signal.unavailable('usb_peripherals', f"lsusb exited {result.returncode}")

    classes = []
    for line in result.stdout.splitlines():
        for name, pattern in _USB_CLASSES:
            if pattern.search(line):
                classes.append(name)
    return Signal.of('usb_peripherals', tuple(sorted(classes)), MEDIUM, "lsusb")


# =============================================================================
# CPU and memory
# =============================================================================

def probe_cpu_cores(source: SystemInfoSource) -> Signal:
    cores = source.cpu_count()
    if not cores:
        return Signal.unavailable('cpu_cores', "CPU count not available")
    return Signal.of('cpu_cores', int(cores), HIGH, "logical CPUs")


def probe_memory_gb(source: SystemInfoSource) -> Signal:
    total = source.memory_bytes()
    if not total:
        return Signal.unavailable('memory_gb', "memory size not available")
    return Signal.of('memory_gb', int(total // (1024 ** 3)), HIGH, f"{total} bytes")


# =============================================================================
# Virtualization evidence
# =============================================================================

def probe_kernel_virt_type(source: SystemInfoSource) -> Signal:
    """Hypervisor id reported by systemd-detect-virt ("none" on bare metal)."""
    result = source.run_command(['systemd-detect-virt', '--vm'])
    if result is None:
        return Signal.unavailable('kernel_virt_type', "systemd-detect-virt not installed or timed out")
    # Exits non-zero and prints "none" when no hypervisor is found
    value = result.stdout.strip().lower()
    if not value:
        return Signal.unavailable('kernel_virt_type', f"systemd-detect-virt exited {result.returncode}")
    return Signal.of('kernel_virt_type', value, HIGH, "systemd-detect-virt --vm")


def probe_cpu_hypervisor_flag(source: SystemInfoSource) -> Signal:
    flags = source.cpu_flags()
    if flags is None:
        return Signal.unavailable('cpu_hypervisor_flag', "CPU flags not available")
    return Signal.of('cpu_hypervisor_flag', 'hypervisor' in flags, HIGH, "CPU flags")


def probe_pci_vendor_ids(source: SystemInfoSource) -> Signal:
    """Distinct PCI vendor IDs, lowercase hex without the 0x prefix."""
    base = 'sys/bus/pci/devices'
    devices = source.list_dir(base)
    if devices is None:
        return Signal.unavailable('pci_vendor_ids', f"/{base} missing")

    vendors = set()
    for device in devices:
        raw = (source.read_text(f'{base}/{device}/vendor') or '').strip().lower()
        if raw:
            vendors.add(raw[2:] if raw.startswith('0x') else raw)
    return Signal.of('pci_vendor_ids', tuple(sorted(vendors)), HIGH, f"/{base}")


def probe_kernel_modules(source: SystemInfoSource) -> Signal:
    content = source.read_text('proc/modules')
    if content is None:
        return Signal.unavailable('kernel_modules', "/proc/modules not readable")
    modules = sorted({line.split()[0] for line in content.splitlines() if line.strip()})
    return Signal.of('kernel_modules', tuple(modules), HIGH, "/proc/modules")


# =============================================================================
# Registry and collection
# =============================================================================

PROBES: Tuple[Tuple[str, Probe], ...] = (
    ('chassis_type', probe_chassis_type),
    ('product_name', probe_product_name),
    ('sys_vendor', probe_sys_vendor),
    ('battery_count', probe_battery_count),
    ('display_connectors', probe_display_connectors),
    ('connected_displays', probe_connected_displays),
    ('network_interfaces', probe_network_interfaces),
    ('audio_devices', probe_audio_devices),
    ('usb_peripherals', probe_usb_peripherals),
    ('cpu_cores', probe_cpu_cores),
    ('memory_gb', probe_memory_gb),
    ('kernel_virt_type', probe_kernel_virt_type),
    ('cpu_hypervisor_flag', probe_cpu_hypervisor_flag),
    ('pci_vendor_ids', probe_pci_vendor_ids),
    ('kernel_modules', probe_kernel_modules),
)

HARDWARE_PROBES = (
    'chassis_type', 'product_name', 'battery_count', 'display_connectors',
    'connected_displays', 'network_interfaces', 'audio_devices',
    'usb_peripherals', 'cpu_cores', 'memory_gb',
)

VIRTUALIZATION_PROBES = (
    'kernel_virt_type', 'product_name', 'sys_vendor', 'cpu_hypervisor_flag',
    'pci_vendor_ids', 'kernel_modules',
)


def run_probe(name: str, probe: Probe, source: SystemInfoSource) -> Signal:
    """Run one probe, turning any unexpected failure into an unavailable signal."""
    try:
        return probe(source)
    except Exception as e:
        return Signal.unavailable(name, f"probe failed: {e}")


def collect_signals(
    source: SystemInfoSource,
    config: Optional[DetectorConfig] = None,
    only: Optional[Sequence[str]] = None,
    logger: Optional[DetectionLogger] = None,
) -> Tuple[Signal, ...]:
    """
    Run the probes against a source.

    Args:
        source: Where system information is read from
        config: Scheduling options (default: DetectorConfig())
        only: Restrict to these probe names (default: all)
        logger: Logger for per-probe diagnostics (default: get_logger())

    Returns:
        Signals in PROBES order, one per selected probe
    """
    config = config or DetectorConfig()
    log = logger or get_logger()
    selected = [(name, probe) for name, probe in PROBES if only is None or name in only]

    log.section("Signal probes")
    if config.parallel and len(selected) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            signals = tuple(executor.map(lambda item: run_probe(item[0], item[1], source), selected))
    else:
        signals = tuple(run_probe(name, probe, source) for name, probe in selected)

    for signal in signals:
        suffix = f" ({signal.detail})" if signal.detail else ""
        log.debug(f"  {signal}{suffix}")
    return signals
