"""
Confidence Tiers for Classification Results

This module defines the coarse confidence tiers attached to signals,
hardware classifications and virtualization classifications, and the score
thresholds used to derive a tier from accumulated evidence points.

Usage:
    from hwprofile.core.confidence import ConfidenceTier, tier_for_score

    tier = tier_for_score(75)        # ConfidenceTier.HIGH
    tier = tier_for_score(40)        # ConfidenceTier.MEDIUM

    if tier.at_least(ConfidenceTier.MEDIUM):
        print("trustworthy enough to apply without prompting")
"""

from enum import Enum


class ConfidenceTier(Enum):
    """
    Coarse trust bucket for a piece of evidence or a classification.

    HIGH: Authoritative source or strong accumulated evidence
        - Hardware classification score >= 60
        - Kernel-reported hypervisor, DMI marker match

    MEDIUM: Plausible but indirect evidence
        - Hardware classification score >= 30
        - Generic hypervisor CPU flag, paravirtual driver signatures

    LOW: Weak evidence; callers should consider prompting a human
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    def at_least(self, other: 'ConfidenceTier') -> bool:
        """True if this tier is as trustworthy as ``other`` or more."""
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: str) -> 'ConfidenceTier':
        """Parse a tier name case-insensitively (``"High"`` -> HIGH)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown confidence tier: {value!r}") from None


_TIER_RANK = {
    ConfidenceTier.LOW: 0,
    ConfidenceTier.MEDIUM: 1,
    ConfidenceTier.HIGH: 2,
}


# Score thresholds for hardware classification tiers
HIGH_CONFIDENCE_SCORE = 60
MEDIUM_CONFIDENCE_SCORE = 30


def tier_for_score(score: int) -> ConfidenceTier:
    """Derive a confidence tier from a winning evidence score."""
    if score >= HIGH_CONFIDENCE_SCORE:
        return ConfidenceTier.HIGH
    if score >= MEDIUM_CONFIDENCE_SCORE:
        return ConfidenceTier.MEDIUM
    return ConfidenceTier.LOW
