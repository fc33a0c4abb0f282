"""
System Information Sources

The probes never touch the filesystem or spawn processes directly; they go
through a SystemInfoSource. This keeps every probe testable against a fake
sysfs tree or an in-memory source, without a real machine or root.

Two implementations are provided:
- LinuxSystemSource: reads sysfs/procfs under a root directory, runs
  commands with a timeout, and uses psutil / py-cpuinfo for CPU and memory
- StaticSystemSource: in-memory files, command outputs and CPU facts

Every method returns None when the information cannot be read. A None is
"unavailable", never "absent".
"""

import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import cpuinfo
import psutil


class CommandResult(NamedTuple):
    """Completed external command."""
    returncode: int
    stdout: str


class SystemInfoSource(ABC):
    """
    Capability interface over the host machine.

    Paths are relative to the filesystem root, without a leading slash
    (e.g. "sys/class/dmi/id/chassis_type").
    """

    @abstractmethod
    def read_text(self, path: str) -> Optional[str]:
        """Contents of a file, or None if missing/unreadable."""

    @abstractmethod
    def list_dir(self, path: str) -> Optional[List[str]]:
        """Sorted entry names of a directory, or None if missing/unreadable."""

    @abstractmethod
    def run_command(self, argv: Sequence[str]) -> Optional[CommandResult]:
        """Run a command; None if it is not installed or timed out."""

    @abstractmethod
    def cpu_count(self) -> Optional[int]:
        """Number of logical CPUs."""

    @abstractmethod
    def memory_bytes(self) -> Optional[int]:
        """Total physical memory in bytes."""

    @abstractmethod
    def cpu_flags(self) -> Optional[List[str]]:
        """CPU feature flags (lowercase)."""

    def exists(self, path: str) -> bool:
        return self.read_text(path) is not None or self.list_dir(path) is not None


# =============================================================================
# Linux (live or rooted at a fake tree)
# =============================================================================

class LinuxSystemSource(SystemInfoSource):
    """
    Reads a Linux system through sysfs/procfs and standard utilities.

    When ``root`` is not "/" the source describes a captured or fake tree:
    CPU and memory facts are parsed from ``root/proc`` rather than asked of
    psutil, and commands are only run if ``allow_commands`` is True.
    """

    def __init__(
        self,
        root: Path = Path('/'),
        command_timeout: float = 5.0,
        allow_commands: Optional[bool] = None,
    ):
        self.root = Path(root)
        self.command_timeout = command_timeout
        self.is_live = self.root == Path('/')
        self.allow_commands = self.is_live if allow_commands is None else allow_commands

    def _path(self, path: str) -> Path:
        return self.root / path.lstrip('/')

    def read_text(self, path: str) -> Optional[str]:
        try:
            return self._path(path).read_text(errors='replace')
        except (OSError, ValueError):
            return None

    def list_dir(self, path: str) -> Optional[List[str]]:
        try:
            return sorted(entry.name for entry in self._path(path).iterdir())
        except OSError:
            return None

    def run_command(self, argv: Sequence[str]) -> Optional[CommandResult]:
        if not self.allow_commands or shutil.which(argv[0]) is None:
            return None
        try:
            result = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                timeout=self.command_timeout
            )
        except (subprocess.TimeoutExpired, OSError):
            return None
        return CommandResult(result.returncode, result.stdout)

    def cpu_count(self) -> Optional[int]:
        if self.is_live:
            return psutil.cpu_count(logical=True)
        content = self.read_text('proc/cpuinfo')
        if content is None:
            return None
        count = len(re.findall(r'^processor\s*:', content, re.MULTILINE))
        return count or None

    def memory_bytes(self) -> Optional[int]:
        if self.is_live:
            return psutil.virtual_memory().total
        content = self.read_text('proc/meminfo')
        if content is None:
            return None
        match = re.search(r'^MemTotal:\s*(\d+)\s*kB', content, re.MULTILINE)
        return int(match.group(1)) * 1024 if match else None

    def cpu_flags(self) -> Optional[List[str]]:
        # The kernel reports the hypervisor bit in /proc/cpuinfo; py-cpuinfo
        # covers platforms without procfs.
        content = self.read_text('proc/cpuinfo')
        if content is not None:
            match = re.search(r'^flags\s*:\s*(.*)$', content, re.MULTILINE)
            if match:
                return match.group(1).lower().split()
            return []
        if not self.is_live:
            return None
        flags = cpuinfo.get_cpu_info().get('flags')
        return [flag.lower() for flag in flags] if flags is not None else None


# =============================================================================
# In-memory source
# =============================================================================

class StaticSystemSource(SystemInfoSource):
    """
    Fully in-memory source for tests and replaying captured snapshots.

    Directories are implied by file paths ("sys/class/net/eth0/type" makes
    "sys/class/net" list "eth0"); ``dirs`` adds empty directories.
    Commands not present in ``commands`` are treated as not installed.
    """

    def __init__(
        self,
        files: Optional[Dict[str, str]] = None,
        dirs: Sequence[str] = (),
        commands: Optional[Dict[Tuple[str, ...], Optional[CommandResult]]] = None,
        cpu_count: Optional[int] = None,
        memory_bytes: Optional[int] = None,
        cpu_flags: Optional[List[str]] = None,
    ):
        self.files = {k.strip('/'): v for k, v in (files or {}).items()}
        self.dirs = {d.strip('/') for d in dirs}
        self.commands = dict(commands or {})
        self._cpu_count = cpu_count
        self._memory_bytes = memory_bytes
        self._cpu_flags = cpu_flags

    def read_text(self, path: str) -> Optional[str]:
        return self.files.get(path.strip('/'))

    def list_dir(self, path: str) -> Optional[List[str]]:
        prefix = path.strip('/') + '/'
        names = set()
        for known in list(self.files) + list(self.dirs):
            if known.startswith(prefix):
                names.add(known[len(prefix):].split('/', 1)[0])
        if not names and path.strip('/') not in self.dirs:
            return None
        return sorted(names)

    def run_command(self, argv: Sequence[str]) -> Optional[CommandResult]:
        return self.commands.get(tuple(argv))

    def cpu_count(self) -> Optional[int]:
        return self._cpu_count

    def memory_bytes(self) -> Optional[int]:
        return self._memory_bytes

    def cpu_flags(self) -> Optional[List[str]]:
        return self._cpu_flags
