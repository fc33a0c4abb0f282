"""
Hardware Classifier

Folds collected signals through the evidence rules into a per-category
scoreboard, picks the winning category and derives a confidence tier from
the winning score.

The scoreboard is an immutable value threaded through the fold, so the
classifier holds no state between runs and is safe to call repeatedly.

Usage:
    from hwprofile.classification import HardwareClassifier

    result = HardwareClassifier().classify(signals)
    print(result.category.value, result.confidence_tier.value, result.winning_score)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.confidence import tier_for_score
from ..core.errors import InformationUnavailableError
from ..core.structures import (
    Category,
    CATEGORY_PRIORITY,
    HardwareClassification,
    HardwareFacts,
    Signal,
)
from ..logging import DetectionLogger, get_logger
from .rules import EVIDENCE_RULES, EvidenceRule, derive_signals


@dataclass(frozen=True)
class CategoryScoreboard:
    """Per-category evidence points for one classification run."""
    scores: Dict[Category, int] = field(
        default_factory=lambda: {category: 0 for category in CATEGORY_PRIORITY}
    )

    @classmethod
    def empty(cls) -> 'CategoryScoreboard':
        return cls()

    def add(self, category: Category, points: int) -> 'CategoryScoreboard':
        """Return a new scoreboard with ``points`` added to ``category``."""
        updated = dict(self.scores)
        updated[category] = updated.get(category, 0) + points
        return CategoryScoreboard(updated)

    def __getitem__(self, category: Category) -> int:
        return self.scores.get(category, 0)

    def winner(self) -> Tuple[Category, int]:
        """
        Highest-scoring category.

        Ties go to the earlier category in CATEGORY_PRIORITY
        (Desktop > Laptop > Workstation > Server).
        """
        best = CATEGORY_PRIORITY[0]
        for category in CATEGORY_PRIORITY[1:]:
            if self[category] > self[best]:
                best = category
        return best, self[best]


@dataclass(frozen=True)
class Contribution:
    """A rule that fired for a signal."""
    signal: Signal
    rule: EvidenceRule

    @property
    def points(self) -> int:
        return self.rule.points


def fold_evidence(
    signals: Sequence[Signal],
    rules: Sequence[EvidenceRule] = EVIDENCE_RULES,
) -> Tuple[CategoryScoreboard, Tuple[Contribution, ...]]:
    """
    Apply every matching rule to every available signal, in signal order.

    Returns:
        (scoreboard, contributions in the order they fired)
    """
    board = CategoryScoreboard.empty()
    fired: List[Contribution] = []
    for signal in signals:
        if not signal.available:
            continue
        for rule in rules:
            if rule.applies_to(signal):
                board = board.add(rule.category, rule.points)
                fired.append(Contribution(signal, rule))
    return board, tuple(fired)


def extract_facts(signals: Sequence[Signal]) -> HardwareFacts:
    """Headline facts for the report; None where the probe was unavailable."""
    by_name = {signal.name: signal for signal in signals if signal.available}

    battery = by_name.get('battery_count')
    network = by_name.get('network_interfaces')
    cores = by_name.get('cpu_cores')
    memory = by_name.get('memory_gb')

    return HardwareFacts(
        has_battery=battery.value > 0 if battery else None,
        has_wireless='wireless' in network.value if network else None,
        cpu_cores=cores.value if cores else None,
        memory_gb=memory.value if memory else None,
    )


class HardwareClassifier:
    """
    Evidence-weighted laptop/desktop/workstation/server classifier.

    Args:
        rules: Evidence rule table (default: EVIDENCE_RULES)
    """

    def __init__(self, rules: Sequence[EvidenceRule] = EVIDENCE_RULES):
        self.rules = tuple(rules)

    def classify(
        self,
        signals: Sequence[Signal],
        logger: Optional[DetectionLogger] = None,
    ) -> HardwareClassification:
        """
        Classify the machine described by ``signals``.

        Raises:
            InformationUnavailableError: if no signal is available at all
        """
        log = logger or get_logger()
        if not any(signal.available for signal in signals):
            raise InformationUnavailableError(len(signals))

        all_signals = derive_signals(signals)
        board, fired = fold_evidence(all_signals, self.rules)
        category, score = board.winner()
        tier = tier_for_score(score)

        log.section("Evidence")
        for contribution in fired:
            log.debug(f"  +{contribution.points:<3d} {contribution.rule.category.value:<12s} "
                      f"{contribution.rule.description} ({contribution.signal})")
        log.debug("  Scores: " + ", ".join(
            f"{c.value}={board[c]}" for c in CATEGORY_PRIORITY))

        if score == 0:
            log.warning("No hardware evidence fired; defaulting to desktop at low confidence")

        return HardwareClassification(
            category=category,
            winning_score=score,
            confidence_tier=tier,
            contributing_signals=tuple(
                (c.signal, c.points) for c in fired if c.rule.category is category
            ) if score > 0 else (),
            scores={c: board[c] for c in CATEGORY_PRIORITY},
            facts=extract_facts(signals),
        )


def classify_hardware(
    signals: Sequence[Signal],
    rules: Sequence[EvidenceRule] = EVIDENCE_RULES,
) -> HardwareClassification:
    """Convenience wrapper around HardwareClassifier(rules).classify()."""
    return HardwareClassifier(rules).classify(signals)
