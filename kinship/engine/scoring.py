"""Relationship scoring algorithm.

Calculates a 0-100 relationship score from interaction history:
    - Recency (50): days since the most recent interaction
    - Frequency (30): interactions in the trailing six months
    - Variety (20): distinct interaction types in the trailing six months

The score is never stored; it is recomputed from current interactions.
"today" is passed in explicitly so results are reproducible.

Usage:
    from kinship.engine.scoring import compute_score, get_contact_score

    score = compute_score(interactions, today=date(2026, 5, 1))
    score = get_contact_score(db, contact_id)
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from kinship.core.logging import get_logger
from kinship.db.database import Database
from kinship.db.models import Interaction

logger = get_logger(__name__)


# =============================================================================
# SCORING TABLES
# =============================================================================

SCORING_WINDOW_MONTHS = 6

# (max days since last interaction, points); anything older scores 0
RECENCY_STEPS: list[tuple[int, int]] = [
    (7, 50),
    (30, 40),
    (90, 25),
    (180, 10),
]

# (min interactions in window, points); 1-2 interactions score the floor
FREQUENCY_STEPS: list[tuple[int, int]] = [
    (10, 30),
    (6, 24),
    (3, 18),
]
FREQUENCY_FLOOR = 10

VARIETY_MAX = 20
VARIETY_FULL_TYPES = 5


class ScoreLevel(str, Enum):
    """Qualitative relationship level."""

    STRONG = "strong"
    GOOD = "good"
    WEAK = "weak"
    CRITICAL = "critical"
    NONE = "none"


LEVEL_LABELS: dict[ScoreLevel, str] = {
    ScoreLevel.STRONG: "Strong",
    ScoreLevel.GOOD: "Good",
    ScoreLevel.WEAK: "Weak",
    ScoreLevel.CRITICAL: "Critical",
    ScoreLevel.NONE: "No data",
}


@dataclass
class RelationshipScore:
    """Computed relationship score.

    Attributes:
        score: Total 0-100
        level: Qualitative level
        label: Display label for the level
        recency: Recency points (0-50)
        frequency: Frequency points (0-30)
        variety: Variety points, rounded (0-20)
        last_interaction_days: Days since the latest interaction, None without recent data
        total_interactions: Interactions inside the six-month window
        has_history: True if any interaction exists, however old
    """

    score: int = 0
    level: ScoreLevel = ScoreLevel.NONE
    label: str = LEVEL_LABELS[ScoreLevel.NONE]
    recency: int = 0
    frequency: int = 0
    variety: int = 0
    last_interaction_days: Optional[int] = None
    total_interactions: int = 0
    has_history: bool = False

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "level": self.level.value,
            "label": self.label,
            "recency": self.recency,
            "frequency": self.frequency,
            "variety": self.variety,
            "lastInteractionDays": self.last_interaction_days,
            "totalInteractions": self.total_interactions,
            "hasHistory": self.has_history,
        }


# =============================================================================
# SCORING FUNCTIONS
# =============================================================================


def _as_date(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def recency_points(days_since_last: int) -> int:
    """Recency sub-score for a number of days since the last interaction."""
    for max_days, points in RECENCY_STEPS:
        if days_since_last <= max_days:
            return points
    return 0


def frequency_points(count: int) -> int:
    """Frequency sub-score for a number of interactions in the window."""
    for min_count, points in FREQUENCY_STEPS:
        if count >= min_count:
            return points
    return FREQUENCY_FLOOR


def variety_points(unique_types: int) -> float:
    """Unrounded variety sub-score for a number of distinct types."""
    return min(unique_types / VARIETY_FULL_TYPES * VARIETY_MAX, VARIETY_MAX)


def classify(score: int) -> ScoreLevel:
    """Map a total score to its level."""
    if score >= 80:
        return ScoreLevel.STRONG
    if score >= 60:
        return ScoreLevel.GOOD
    if score >= 40:
        return ScoreLevel.WEAK
    return ScoreLevel.CRITICAL


def compute_score(
    interactions: Iterable[Interaction], today: Optional[date] = None
) -> RelationshipScore:
    """Score one subject's interaction history.

    Args:
        interactions: Interactions of a single contact, family or invite group
        today: Reference date (defaults to today)

    Returns:
        RelationshipScore; level NONE when nothing happened in the last six months
    """
    if today is None:
        today = date.today()

    dated = [i for i in interactions if i.interaction_date is not None]
    cutoff = today - relativedelta(months=SCORING_WINDOW_MONTHS)
    recent = [i for i in dated if _as_date(i.interaction_date) >= cutoff]  # type: ignore[arg-type]

    if not recent:
        return RelationshipScore(has_history=bool(dated))

    last = max(_as_date(i.interaction_date) for i in dated)  # type: ignore[arg-type]
    days_since_last = (today - last).days

    recency = recency_points(days_since_last)
    frequency = frequency_points(len(recent))
    variety = variety_points(len({i.type for i in recent}))

    total = int(round(recency + frequency + variety))
    level = classify(total)

    return RelationshipScore(
        score=total,
        level=level,
        label=LEVEL_LABELS[level],
        recency=recency,
        frequency=frequency,
        variety=int(round(variety)),
        last_interaction_days=days_since_last,
        total_interactions=len(recent),
        has_history=True,
    )


# =============================================================================
# SUBJECT LOOKUPS
# =============================================================================


def get_contact_score(
    db: Database, contact_id: int, today: Optional[date] = None
) -> RelationshipScore:
    """Score a contact from its logged interactions."""
    return compute_score(db.get_interactions(contact_id=contact_id), today=today)


def get_family_score(
    db: Database, family_id: int, today: Optional[date] = None
) -> RelationshipScore:
    """Score a family from its logged interactions."""
    return compute_score(db.get_interactions(family_id=family_id), today=today)


def get_invite_group_score(
    db: Database, invite_group_id: int, today: Optional[date] = None
) -> RelationshipScore:
    """Score an invite group from its logged interactions."""
    return compute_score(db.get_interactions(invite_group_id=invite_group_id), today=today)


@dataclass
class InviteGroupWithScore:
    """Invite group summary row with its score."""

    id: int
    name: str
    family_id: Optional[int]
    family_name: Optional[str]
    member_count: int
    score: RelationshipScore


def get_invite_groups_with_scores(
    db: Database, today: Optional[date] = None
) -> list[InviteGroupWithScore]:
    """All invite groups ordered by name, each with its score."""
    results = []
    for group in db.get_invite_groups():
        assert group.id is not None
        family = db.get_family(group.family_id) if group.family_id is not None else None
        results.append(
            InviteGroupWithScore(
                id=group.id,
                name=group.name,
                family_id=group.family_id,
                family_name=family.name if family else None,
                member_count=len(group.member_ids),
                score=get_invite_group_score(db, group.id, today=today),
            )
        )

    logger.debug("Invite groups scored", extra={"context": {"count": len(results)}})
    return results
