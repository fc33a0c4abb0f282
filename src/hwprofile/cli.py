"""
Hardware Classification CLI

Classifies the current machine as laptop/desktop/workstation/server,
detects virtualization, and recommends a configuration profile.

Usage:
    # Full detection: summary plus KEY=value block (default)
    hwprofile detect

    # Only the KEY=value block, for scripts
    hwprofile detect --quiet

    # Bare hardware category
    hwprofile type

    # Recommended power profile
    hwprofile profile

    # Virtualization only
    hwprofile vm

    # Classify a captured sysfs/procfs tree
    hwprofile --root /tmp/snapshot detect

Exit codes:
    0  success
    1  invalid configuration
    2  usage error
    3  no system information source could be read
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import DetectorConfig, get_config
from .core.errors import ConfigError, InformationUnavailableError
from .engine import ClassificationEngine
from .logging import DetectionLogger, create_detection_logger
from .reporting.report import DetectionReport, ReportGenerator


EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_NO_INFORMATION = 3

COMMANDS = ('detect', 'type', 'profile', 'vm', 'help')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hwprofile',
        description="Hardware type and virtualization detection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        'command',
        nargs='?',
        default='detect',
        choices=COMMANDS,
        help="detect (default): full report; type: hardware category only; "
             "profile: recommended power profile; vm: virtualization only"
    )

    # Output options
    parser.add_argument(
        '--format', '-f',
        choices=['kv', 'json'],
        default='kv',
        help="Machine-readable format for detect/vm (default: kv)"
    )
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help="Omit the human-readable summary"
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help="Show per-probe and per-rule diagnostics on stderr"
    )
    parser.add_argument(
        '--log-dir',
        type=Path,
        default=None,
        help="Also write a timestamped log file to this directory"
    )

    # Detection options
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help="JSON config file (applied over project and user config)"
    )
    parser.add_argument(
        '--root',
        type=Path,
        default=None,
        help="Filesystem root for sysfs/procfs (default: /)"
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help="Per-command timeout in seconds"
    )
    parser.add_argument(
        '--sequential',
        action='store_true',
        help="Run probes one at a time instead of in a thread pool"
    )

    return parser


def load_config(args: argparse.Namespace) -> DetectorConfig:
    """Merge config files/environment with command-line flags."""
    config = get_config(args.config)
    overrides = config.to_dict()
    if args.root is not None:
        overrides['root'] = args.root
    if args.timeout is not None:
        overrides['command_timeout'] = args.timeout
    if args.sequential:
        overrides['parallel'] = False
    return DetectorConfig.from_dict(overrides)


def _emit(report: DetectionReport, args: argparse.Namespace):
    generator = ReportGenerator()
    if args.format == 'json':
        print(generator.generate_json_report(report))
        return
    if not args.quiet:
        print(generator.generate_text_report(report))
    print(generator.generate_kv_report(report))


def run(args: argparse.Namespace, logger: DetectionLogger) -> int:
    try:
        config = load_config(args)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG

    engine = ClassificationEngine(config=config, logger=logger)

    try:
        if args.command == 'type':
            hardware = engine.detect_hardware()
            print(hardware.category.value)
        elif args.command == 'profile':
            report = engine.detect()
            print(report.profile.power_profile)
        elif args.command == 'vm':
            _emit(DetectionReport(virtualization=engine.detect_virtualization()), args)
        else:
            report = engine.detect()
            _emit(report, args)
            logger.success(f"Hardware type detected: {report.hardware.category.value} "
                           f"({report.hardware.confidence_tier.value} confidence)")
    except InformationUnavailableError as e:
        logger.error(f"{e}; classification impossible")
        return EXIT_NO_INFORMATION

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'help':
        parser.print_help()
        return EXIT_OK

    logger = create_detection_logger(args.log_dir, command=args.command, verbose=args.verbose)
    with logger:
        return run(args, logger)


if __name__ == "__main__":
    sys.exit(main())
