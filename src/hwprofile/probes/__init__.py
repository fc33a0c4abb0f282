"""
Signal Probes

System information sources and the probes that turn them into signals.
"""

from .source import (
    SystemInfoSource,
    LinuxSystemSource,
    StaticSystemSource,
    CommandResult,
)
from .probes import (
    PROBES,
    HARDWARE_PROBES,
    VIRTUALIZATION_PROBES,
    SMBIOS_CHASSIS_TYPES,
    collect_signals,
    run_probe,
)

__all__ = [
    # Sources
    'SystemInfoSource',
    'LinuxSystemSource',
    'StaticSystemSource',
    'CommandResult',
    # Probes
    'PROBES',
    'HARDWARE_PROBES',
    'VIRTUALIZATION_PROBES',
    'SMBIOS_CHASSIS_TYPES',
    'collect_signals',
    'run_probe',
]
