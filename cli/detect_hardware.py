#!/usr/bin/env python3
"""
Hardware Type Detection

Detects whether the system is a laptop, desktop, workstation or server,
whether it runs under a hypervisor, and which configuration profile suits it.

Usage:
    # Full detection with recommendations (default)
    ./cli/detect_hardware.py

    # Output detected hardware type only
    ./cli/detect_hardware.py type

    # Output suitable power management profile
    ./cli/detect_hardware.py profile

    # Virtualization only
    ./cli/detect_hardware.py vm

Equivalent to the installed `hwprofile` command.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hwprofile.cli import main


if __name__ == "__main__":
    sys.exit(main())
