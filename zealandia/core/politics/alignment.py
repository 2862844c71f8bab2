"""Political position comparator

alignment(a, b) scores how well position `a` (player / policy / candidate)
agrees with what holder `b` (usually a demographic slice) cares about.
Pure functions, no external dependencies.

Result is a salience-weighted mean over 1 cube term + one term per issue,
each term rescaled to [-1, 1]. Issue weights come from `b.salience`, the cube
weight is a fixed constant.
"""

import math
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

from zealandia.core.politics.position import (
    ISSUES,
    POSITION_SPAN,
    PoliticalPosition,
)

CUBE_WEIGHT = 1.0
MAX_CUBE_DISTANCE = math.sqrt(3 * POSITION_SPAN**2)  # ≈ 34.64


@dataclass(frozen=True)
class IssueBreakdown:
    """One issue's share of an alignment score."""

    issue: str
    player_position: float
    group_position: float
    salience: float
    weight: float  # salience / total weight
    contribution: float  # agreement in [-1, 1] * weight
    kind: Literal["issue"] = "issue"


@dataclass(frozen=True)
class CubeBreakdown:
    """Cube-distance share of an alignment score."""

    distance: float
    weight: float
    contribution: float
    kind: Literal["cube"] = "cube"


Breakdown = Union[IssueBreakdown, CubeBreakdown]


@dataclass
class AlignmentResult:
    score: float = 0.0  # [-1, 1]
    issue_matches: List[IssueBreakdown] = field(default_factory=list)
    cube_match: Optional[CubeBreakdown] = None


def cube_distance(a: PoliticalPosition, b: PoliticalPosition) -> float:
    """Euclidean distance between two cubes, in [0, MAX_CUBE_DISTANCE]."""
    return math.dist(a.cube.as_tuple(), b.cube.as_tuple())


def cube_agreement(distance: float) -> float:
    """0 distance -> +1, max distance -> -1."""
    return 1.0 - 2.0 * min(distance, MAX_CUBE_DISTANCE) / MAX_CUBE_DISTANCE


def issue_agreement(a_value: float, b_value: float) -> float:
    """Per-issue agreement rescaled from [0, 1] to [-1, 1]."""
    agreement = 1.0 - abs(a_value - b_value) / POSITION_SPAN
    return 2.0 * max(0.0, min(1.0, agreement)) - 1.0


def alignment_breakdown(
    a: PoliticalPosition,
    b: PoliticalPosition,
    cube_weight: float = CUBE_WEIGHT,
) -> AlignmentResult:
    """Full comparator with the per-term audit trail.

    Zero-weight issues are left out of the breakdown. If every weight is zero
    the result is neutral (0) with an empty breakdown.
    """
    weighted_issues = [(i, b.salience_of(i)) for i in ISSUES if b.salience_of(i) > 0]
    total_weight = cube_weight + sum(w for _, w in weighted_issues)
    if total_weight <= 0:
        return AlignmentResult()

    distance = cube_distance(a, b)
    cube_share = cube_weight / total_weight
    cube_match = CubeBreakdown(
        distance=distance,
        weight=cube_share,
        contribution=cube_agreement(distance) * cube_share,
    )

    issue_matches: List[IssueBreakdown] = []
    for issue, salience in weighted_issues:
        share = salience / total_weight
        issue_matches.append(
            IssueBreakdown(
                issue=issue,
                player_position=a.issue(issue),
                group_position=b.issue(issue),
                salience=salience,
                weight=share,
                contribution=issue_agreement(a.issue(issue), b.issue(issue)) * share,
            )
        )

    score = cube_match.contribution + sum(m.contribution for m in issue_matches)
    return AlignmentResult(
        score=max(-1.0, min(1.0, score)),
        issue_matches=issue_matches,
        cube_match=cube_match if cube_weight > 0 else None,
    )


def alignment_score(
    a: PoliticalPosition,
    b: PoliticalPosition,
    cube_weight: float = CUBE_WEIGHT,
) -> float:
    """Score only. See alignment_breakdown."""
    return alignment_breakdown(a, b, cube_weight).score
