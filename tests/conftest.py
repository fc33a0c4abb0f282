"""
Shared fixtures: fake sysfs/procfs trees and an isolated configuration
environment.
"""

from pathlib import Path
from typing import Dict

import pytest

from hwprofile.logging import set_logger


def _cpuinfo(cores: int, hypervisor: bool = False) -> str:
    flags = "fpu vme de pse tsc msr pae sse sse2 avx avx2"
    if hypervisor:
        flags += " hypervisor"
    blocks = []
    for i in range(cores):
        blocks.append(
            f"processor\t: {i}\n"
            f"vendor_id\t: GenuineIntel\n"
            f"model name\t: Test CPU\n"
            f"flags\t\t: {flags}\n"
        )
    return "\n".join(blocks)


def _meminfo(gb: int) -> str:
    return f"MemTotal:       {gb * 1024 * 1024} kB\nMemFree:        1024 kB\n"


LAPTOP_FILES: Dict[str, str] = {
    "sys/class/dmi/id/chassis_type": "10\n",
    "sys/class/dmi/id/product_name": "ThinkPad X1 Carbon Gen 9\n",
    "sys/class/dmi/id/sys_vendor": "LENOVO\n",
    "sys/class/power_supply/AC/type": "Mains\n",
    "sys/class/power_supply/BAT0/type": "Battery\n",
    "sys/class/power_supply/BAT0/scope": "System\n",
    "sys/class/power_supply/hidpp_battery_0/type": "Battery\n",
    "sys/class/power_supply/hidpp_battery_0/scope": "Device\n",
    "sys/class/net/lo/type": "772\n",
    "sys/class/net/wlp2s0/wireless/": "",
    "sys/class/net/docker0/type": "1\n",
    "sys/class/drm/card0/dev": "226:0\n",
    "sys/class/drm/card0-eDP-1/status": "connected\n",
    "sys/class/drm/card0-HDMI-A-1/status": "disconnected\n",
    "sys/bus/pci/devices/0000:00:02.0/vendor": "0x8086\n",
    "proc/asound/card0/pcm0p/info": "",
    "proc/asound/card0/pcm0c/info": "",
    "proc/cpuinfo": _cpuinfo(8),
    "proc/meminfo": _meminfo(16),
    "proc/modules": "i915 3000000 12 - Live 0x0000000000000000\nsnd_hda_intel 57344 3 - Live 0x0\n",
}

SERVER_VM_FILES: Dict[str, str] = {
    "sys/class/dmi/id/chassis_type": "1\n",
    "sys/class/dmi/id/product_name": "Standard PC (Q35 + ICH9, 2009)\n",
    "sys/class/dmi/id/sys_vendor": "QEMU\n",
    "sys/class/power_supply/": "",
    "sys/class/net/lo/type": "772\n",
    "sys/class/net/enp1s0/type": "1\n",
    "sys/class/net/enp2s0/type": "1\n",
    "sys/class/drm/card0/dev": "226:0\n",
    "sys/class/drm/card0-Virtual-1/status": "disconnected\n",
    "sys/bus/pci/devices/0000:00:01.0/vendor": "0x1af4\n",
    "proc/cpuinfo": _cpuinfo(4, hypervisor=True),
    "proc/meminfo": _meminfo(8),
    "proc/modules": "virtio_net 57344 0 - Live 0x0\nvirtio_blk 20480 2 - Live 0x0\n",
}


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Write a fake filesystem tree; keys ending in "/" are directories."""
    for rel, content in files.items():
        path = root / rel
        if rel.endswith("/"):
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def laptop_root(tmp_path):
    """Fake sysfs/procfs tree of a physical ThinkPad."""
    return write_tree(tmp_path / "laptop", LAPTOP_FILES)


@pytest.fixture
def server_vm_root(tmp_path):
    """Fake sysfs/procfs tree of a headless QEMU guest."""
    return write_tree(tmp_path / "server_vm", SERVER_VM_FILES)


@pytest.fixture
def empty_root(tmp_path):
    """A root with no system information at all."""
    root = tmp_path / "empty"
    root.mkdir()
    return root


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """No user/project config files and no HWPROFILE_* variables."""
    for name in ("HWPROFILE_ROOT", "HWPROFILE_COMMAND_TIMEOUT",
                 "HWPROFILE_PARALLEL", "HWPROFILE_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    config_home = tmp_path / "xdg"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return tmp_path


@pytest.fixture(autouse=True)
def reset_logger():
    """Each test starts with the default module-level logger."""
    set_logger(None)
    yield
    set_logger(None)
