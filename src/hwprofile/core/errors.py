"""
Exception hierarchy for hwprofile.

Probe-level failures never surface as exceptions; they become unavailable
signals. Only conditions the caller must act on are raised.
"""


class HwProfileError(Exception):
    """Base class for all hwprofile errors."""


class InformationUnavailableError(HwProfileError):
    """
    No system information source could be read at all.

    Raised instead of returning a best-effort guess: a classification built
    from zero evidence would be indistinguishable from a real low-confidence
    desktop.
    """

    def __init__(self, probed: int):
        self.probed = probed
        super().__init__(
            f"Could not read any system information source "
            f"({probed} probes, all unavailable)"
        )


class ReportParseError(HwProfileError, ValueError):
    """A KEY=value report is missing required keys or has malformed values."""


class ConfigError(HwProfileError, ValueError):
    """Invalid configuration value."""
