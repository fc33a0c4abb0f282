"""
Tests for system information sources.
"""

import sys

import pytest
from hwprofile.probes import CommandResult, LinuxSystemSource, StaticSystemSource


class TestLinuxSystemSourceRooted:
    """LinuxSystemSource pointed at a fake tree."""

    def test_read_text(self, laptop_root):
        source = LinuxSystemSource(root=laptop_root)
        assert source.read_text('sys/class/dmi/id/chassis_type').strip() == "10"
        assert source.read_text('/sys/class/dmi/id/chassis_type').strip() == "10"

    def test_missing_file_is_none(self, laptop_root):
        source = LinuxSystemSource(root=laptop_root)
        assert source.read_text('sys/class/dmi/id/does_not_exist') is None
        assert source.list_dir('sys/class/does_not_exist') is None

    def test_list_dir_sorted(self, laptop_root):
        source = LinuxSystemSource(root=laptop_root)
        assert source.list_dir('sys/class/power_supply') == ['AC', 'BAT0', 'hidpp_battery_0']

    def test_cpu_and_memory_from_procfs(self, laptop_root):
        """A non-live root parses /proc instead of asking psutil."""
        source = LinuxSystemSource(root=laptop_root)
        assert not source.is_live
        assert source.cpu_count() == 8
        assert source.memory_bytes() == 16 * 1024 ** 3
        assert 'avx2' in source.cpu_flags()
        assert 'hypervisor' not in source.cpu_flags()

    def test_empty_root_reports_nothing(self, empty_root):
        source = LinuxSystemSource(root=empty_root)
        assert source.cpu_count() is None
        assert source.memory_bytes() is None
        assert source.cpu_flags() is None

    def test_commands_disabled_off_live_root(self, laptop_root):
        source = LinuxSystemSource(root=laptop_root)
        assert source.run_command([sys.executable, '-c', 'print(1)']) is None


class TestLinuxSystemSourceCommands:
    """Command execution with timeout."""

    def test_runs_command(self, tmp_path):
        source = LinuxSystemSource(root=tmp_path, allow_commands=True)
        result = source.run_command([sys.executable, '-c', 'print("hello")'])
        assert result == CommandResult(0, "hello\n")

    def test_missing_command(self, tmp_path):
        source = LinuxSystemSource(root=tmp_path, allow_commands=True)
        assert source.run_command(['hwprofile-no-such-command-xyz']) is None

    def test_timeout_is_unavailable(self, tmp_path):
        """A hung command is abandoned, not waited on."""
        source = LinuxSystemSource(root=tmp_path, command_timeout=0.2, allow_commands=True)
        assert source.run_command([sys.executable, '-c', 'import time; time.sleep(5)']) is None

    def test_nonzero_exit_is_returned(self, tmp_path):
        source = LinuxSystemSource(root=tmp_path, allow_commands=True)
        result = source.run_command([sys.executable, '-c', 'import sys; print("none"); sys.exit(1)'])
        assert result.returncode == 1
        assert result.stdout.strip() == "none"


class TestLiveSource:
    """Live machine facts via psutil."""

    @pytest.mark.skipif(not sys.platform.startswith('linux'), reason="Linux only")
    def test_live_cpu_and_memory(self):
        source = LinuxSystemSource()
        assert source.is_live
        assert source.cpu_count() >= 1
        assert source.memory_bytes() > 0


class TestStaticSystemSource:
    """In-memory source."""

    def test_directories_implied_by_files(self):
        source = StaticSystemSource(files={
            'sys/class/net/eth0/type': '1',
            'sys/class/net/wlan0/wireless/phy': '',
        })
        assert source.list_dir('sys/class/net') == ['eth0', 'wlan0']
        assert source.exists('sys/class/net/wlan0/wireless')
        assert not source.exists('sys/class/net/eth0/wireless')

    def test_explicit_empty_dir(self):
        source = StaticSystemSource(dirs=['sys/class/power_supply'])
        assert source.list_dir('sys/class/power_supply') == []
        assert source.list_dir('sys/class/drm') is None

    def test_unknown_command_not_installed(self):
        source = StaticSystemSource(commands={('lsusb',): CommandResult(0, "")})
        assert source.run_command(['lsusb']) == CommandResult(0, "")
        assert source.run_command(['pactl', 'list', 'short', 'sinks']) is None
