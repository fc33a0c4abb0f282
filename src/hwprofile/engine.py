"""
Classification Engine

Wires the probes, the two classifiers and the recommendation mapper into a
single pass over a point-in-time system snapshot.

Usage:
    from hwprofile.engine import ClassificationEngine

    engine = ClassificationEngine()          # live machine, default config
    report = engine.detect()
    print(report.hardware.category.value, report.virtualization.hypervisor.value)
"""

from typing import Optional, Sequence, Tuple

from .classification.hardware import HardwareClassifier
from .classification.virtualization import VirtualizationClassifier
from .config import DetectorConfig
from .core.errors import InformationUnavailableError
from .core.structures import (
    HardwareClassification,
    Signal,
    VirtualizationClassification,
)
from .logging import DetectionLogger, get_logger
from .probes.probes import HARDWARE_PROBES, VIRTUALIZATION_PROBES, collect_signals
from .probes.source import LinuxSystemSource, SystemInfoSource
from .recommendation.mapper import recommend_profile
from .reporting.report import DetectionReport


class ClassificationEngine:
    """
    One classification run per call; nothing is cached between calls.

    Args:
        config: Detector configuration (default: DetectorConfig())
        source: System information source (default: LinuxSystemSource
            rooted at config.root)
        logger: Logger (default: get_logger())
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        source: Optional[SystemInfoSource] = None,
        logger: Optional[DetectionLogger] = None,
    ):
        self.config = config or DetectorConfig()
        self.source = source or LinuxSystemSource(
            root=self.config.root,
            command_timeout=self.config.command_timeout,
        )
        self.logger = logger or get_logger()

    def collect(self, only: Optional[Sequence[str]] = None) -> Tuple[Signal, ...]:
        """
        Run probes and fail if none of them could read anything.

        Raises:
            InformationUnavailableError: every probe reported unavailable
        """
        signals = collect_signals(self.source, self.config, only=only, logger=self.logger)
        available = sum(1 for signal in signals if signal.available)
        self.logger.debug(f"  {available}/{len(signals)} probes available")
        if available == 0:
            raise InformationUnavailableError(len(signals))
        return signals

    def classify_hardware(self, signals: Sequence[Signal]) -> HardwareClassification:
        return HardwareClassifier().classify(signals, logger=self.logger)

    def classify_virtualization(self, signals: Sequence[Signal]) -> VirtualizationClassification:
        classifier = VirtualizationClassifier(min_confidence=self.config.min_virt_confidence)
        return classifier.classify(signals, logger=self.logger)

    def detect(self) -> DetectionReport:
        """Full run: both classifiers plus the recommended profile."""
        signals = self.collect()
        hardware = self.classify_hardware(signals)
        virtualization = self.classify_virtualization(signals)
        profile = recommend_profile(
            hardware,
            virtualization,
            max_build_jobs=self.config.max_build_jobs,
            max_guest_build_jobs=self.config.max_guest_build_jobs,
        )
        return DetectionReport(hardware, virtualization, profile)

    def detect_hardware(self) -> HardwareClassification:
        """Hardware classifier only."""
        return self.classify_hardware(self.collect(only=HARDWARE_PROBES))

    def detect_virtualization(self) -> VirtualizationClassification:
        """Virtualization cascade only."""
        return self.classify_virtualization(self.collect(only=VIRTUALIZATION_PROBES))
