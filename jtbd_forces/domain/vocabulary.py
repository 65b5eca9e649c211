"""
JTBD force vocabulary.

Static domain definitions shared by every stage of the forces pipeline:
the five force identifiers, the valid strength range, the supported
aggregation methods and the fixed force groupings.
"""

from enum import Enum
from typing import Dict, List, Tuple


class JTBDForce(str, Enum):
    """The five JTBD forces."""

    DEMOGRAPHIC = "demographic"
    PAIN_OF_OLD = "pain_of_old"
    PULL_OF_NEW = "pull_of_new"
    ANCHORS_TO_OLD = "anchors_to_old"
    ANXIETY_OF_NEW = "anxiety_of_new"


class ForceGroup(str, Enum):
    PUSH = "push"
    PULL = "pull"
    BARRIER = "barrier"


class AggregationMethod(str, Enum):
    """Aggregation methods selectable per analysis."""

    WEIGHTED_AVERAGE = "weighted_average"
    MEDIAN = "median"
    MODE = "mode"
    TRIMMED_MEAN = "trimmed_mean"


MIN_FORCE_STRENGTH: float = 1.0
MAX_FORCE_STRENGTH: float = 5.0
NEUTRAL_FORCE_STRENGTH: float = (MIN_FORCE_STRENGTH + MAX_FORCE_STRENGTH) / 2

ALL_FORCES: Tuple[JTBDForce, ...] = tuple(JTBDForce)

# Tie-break order used wherever two forces score the same
FORCE_PRIORITY: Tuple[JTBDForce, ...] = (
    JTBDForce.PAIN_OF_OLD,
    JTBDForce.PULL_OF_NEW,
    JTBDForce.ANCHORS_TO_OLD,
    JTBDForce.ANXIETY_OF_NEW,
    JTBDForce.DEMOGRAPHIC,
)

FORCE_GROUPS: Dict[JTBDForce, ForceGroup] = {
    JTBDForce.DEMOGRAPHIC: ForceGroup.PUSH,
    JTBDForce.PAIN_OF_OLD: ForceGroup.PUSH,
    JTBDForce.PULL_OF_NEW: ForceGroup.PULL,
    JTBDForce.ANCHORS_TO_OLD: ForceGroup.BARRIER,
    JTBDForce.ANXIETY_OF_NEW: ForceGroup.BARRIER,
}

# Sign of the sentiment that strengthens a force when a response has no anchor words
FORCE_POLARITY: Dict[JTBDForce, int] = {
    JTBDForce.DEMOGRAPHIC: 0,
    JTBDForce.PAIN_OF_OLD: -1,
    JTBDForce.PULL_OF_NEW: 1,
    JTBDForce.ANCHORS_TO_OLD: 0,
    JTBDForce.ANXIETY_OF_NEW: -1,
}

FORCE_LABELS: Dict[JTBDForce, str] = {
    JTBDForce.DEMOGRAPHIC: "demographic context",
    JTBDForce.PAIN_OF_OLD: "pain of the old solution",
    JTBDForce.PULL_OF_NEW: "pull of the new solution",
    JTBDForce.ANCHORS_TO_OLD: "anchors to the old solution",
    JTBDForce.ANXIETY_OF_NEW: "anxiety about the new solution",
}


def require_all_forces(table: Dict[JTBDForce, object], name: str) -> None:
    """Fail loudly when a per-force table does not cover exactly the five forces."""
    missing = set(ALL_FORCES) - set(table.keys())
    extra = set(table.keys()) - set(ALL_FORCES)
    if missing or extra:
        raise RuntimeError(
            f"{name} must define every JTBD force exactly once "
            f"(missing: {sorted(f.value for f in missing)}, extra: {sorted(map(str, extra))})"
        )


require_all_forces(FORCE_GROUPS, "FORCE_GROUPS")
require_all_forces(FORCE_POLARITY, "FORCE_POLARITY")
require_all_forces(FORCE_LABELS, "FORCE_LABELS")
if set(FORCE_PRIORITY) != set(ALL_FORCES):
    raise RuntimeError("FORCE_PRIORITY must rank every JTBD force")


PUSH_FORCES: Tuple[JTBDForce, ...] = tuple(
    f for f in FORCE_PRIORITY if FORCE_GROUPS[f] is ForceGroup.PUSH
)
PULL_FORCES: Tuple[JTBDForce, ...] = tuple(
    f for f in FORCE_PRIORITY if FORCE_GROUPS[f] is ForceGroup.PULL
)
BARRIER_FORCES: Tuple[JTBDForce, ...] = tuple(
    f for f in FORCE_PRIORITY if FORCE_GROUPS[f] is ForceGroup.BARRIER
)


def priority_rank(force: JTBDForce) -> int:
    """Position of a force in the tie-break order (0 = highest priority)."""
    return FORCE_PRIORITY.index(JTBDForce(force))


def rank_forces(scores: Dict[JTBDForce, float]) -> List[JTBDForce]:
    """Order forces by descending score, ties broken by FORCE_PRIORITY."""
    return sorted(scores, key=lambda force: (-scores[force], priority_rank(force)))


def is_valid_strength(value: float) -> bool:
    return MIN_FORCE_STRENGTH <= value <= MAX_FORCE_STRENGTH
