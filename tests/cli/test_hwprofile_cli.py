"""
Tests for the hwprofile command-line interface.

Most tests call main() in-process against fake sysfs/procfs trees; one
runs the wrapper script as a subprocess to check stdout/stderr separation.
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest
from hwprofile.cli import EXIT_CONFIG, EXIT_NO_INFORMATION, EXIT_OK, main
from hwprofile.core import Category, Hypervisor
from hwprofile.reporting import parse_kv_report


REPO_ROOT = Path(__file__).parent.parent.parent
SCRIPT = REPO_ROOT / "cli" / "detect_hardware.py"


def run_cli(root, *args):
    return main(["--root", str(root), "--sequential", *args])


class TestDetect:
    """Default `detect` command."""

    def test_kv_block_parses(self, laptop_root, isolated_env, capsys):
        assert run_cli(laptop_root, "detect") == EXIT_OK
        out = capsys.readouterr().out
        report = parse_kv_report(out)
        assert report.hardware.category is Category.LAPTOP
        assert report.virtualization.hypervisor is Hypervisor.NONE
        assert report.profile.power_profile == "laptop"

    def test_default_command_is_detect(self, laptop_root, isolated_env, capsys):
        assert run_cli(laptop_root) == EXIT_OK
        assert "HARDWARE_TYPE=laptop" in capsys.readouterr().out

    def test_quiet_is_kv_only(self, laptop_root, isolated_env, capsys):
        assert run_cli(laptop_root, "detect", "--quiet") == EXIT_OK
        out = capsys.readouterr().out
        assert out.splitlines()[0] == "HARDWARE_TYPE=laptop"
        assert all("=" in line for line in out.splitlines())

    def test_summary_on_stdout_logs_on_stderr(self, laptop_root, isolated_env, capsys):
        run_cli(laptop_root, "detect")
        captured = capsys.readouterr()
        assert "RECOMMENDATIONS" in captured.out
        assert "Hardware type detected: laptop" in captured.err
        assert "Hardware type detected" not in captured.out

    def test_json(self, server_vm_root, isolated_env, capsys):
        assert run_cli(server_vm_root, "detect", "--format", "json") == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["HARDWARE_TYPE"] == "server"
        assert data["VM_TYPE"] == "qemu"
        assert data["POWER_PROFILE"] == "server"

    def test_verbose_shows_evidence(self, laptop_root, isolated_env, capsys):
        run_cli(laptop_root, "detect", "--verbose")
        err = capsys.readouterr().err
        assert "Evidence" in err
        assert "chassis_type: Notebook" in err

    def test_log_dir(self, laptop_root, isolated_env, tmp_path, capsys):
        log_dir = tmp_path / "logs"
        run_cli(laptop_root, "detect", "--log-dir", str(log_dir))
        logs = list(log_dir.glob("detect_*.log"))
        assert len(logs) == 1
        assert "Virtualization cascade" in logs[0].read_text()


class TestSingleValueCommands:
    """`type` and `profile` print one word."""

    def test_type(self, laptop_root, isolated_env, capsys):
        assert run_cli(laptop_root, "type") == EXIT_OK
        assert capsys.readouterr().out == "laptop\n"

    def test_type_server(self, server_vm_root, isolated_env, capsys):
        assert run_cli(server_vm_root, "type") == EXIT_OK
        assert capsys.readouterr().out == "server\n"

    def test_profile(self, server_vm_root, isolated_env, capsys):
        assert run_cli(server_vm_root, "profile") == EXIT_OK
        assert capsys.readouterr().out == "server\n"


class TestVm:
    """`vm` prints only the virtualization section."""

    def test_vm(self, server_vm_root, isolated_env, capsys):
        assert run_cli(server_vm_root, "vm", "--quiet") == EXIT_OK
        out = capsys.readouterr().out
        assert out.splitlines()[0] == "VM_TYPE=qemu"
        assert "HARDWARE_TYPE" not in out
        assert "POWER_PROFILE" not in out


class TestFailures:
    """Exit codes."""

    @pytest.mark.parametrize("command", ["detect", "type", "profile", "vm"])
    def test_no_information(self, empty_root, isolated_env, capsys, command):
        """Nothing readable: non-zero exit and nothing on stdout."""
        assert run_cli(empty_root, command) == EXIT_NO_INFORMATION
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "classification impossible" in captured.err

    def test_bad_config(self, laptop_root, isolated_env, capsys):
        assert run_cli(laptop_root, "--timeout", "0") == EXIT_CONFIG
        assert "Invalid configuration" in capsys.readouterr().err

    def test_missing_config_file(self, laptop_root, isolated_env, capsys):
        assert run_cli(laptop_root, "--config", str(isolated_env / "missing.json")) == EXIT_CONFIG

    @pytest.mark.parametrize("content", [
        '{"command_timeout": "soon"}',
        '{"max_workers": "four"}',
        '{"parallel": 3}',
        '[1, 2]',
    ])
    def test_malformed_config_file(self, laptop_root, isolated_env, capsys, content):
        """Bad values in a config file exit 1 with a message, not a traceback."""
        config_file = isolated_env / "bad.json"
        config_file.write_text(content)
        assert run_cli(laptop_root, "--config", str(config_file), "type") == EXIT_CONFIG
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Invalid configuration" in captured.err

    def test_unknown_command(self, isolated_env, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["reboot"])
        assert exc_info.value.code == 2

    def test_help(self, isolated_env, capsys):
        assert main(["help"]) == EXIT_OK
        assert "usage:" in capsys.readouterr().out


class TestScript:
    """The cli/detect_hardware.py wrapper."""

    def test_runs_as_script(self, laptop_root, isolated_env):
        env = dict(os.environ)
        env["PYTHONPATH"] = str(REPO_ROOT / "src")
        result = subprocess.run(
            [sys.executable, str(SCRIPT), "type", "--root", str(laptop_root)],
            capture_output=True,
            text=True,
            env=env,
            timeout=60,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout == "laptop\n"
