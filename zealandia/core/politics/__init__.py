"""Political positions and the alignment comparator - public API"""

from zealandia.core.politics.position import (
    CUBE_AXES,
    ISSUES,
    PoliticalCube,
    PoliticalPosition,
    make_position,
    validate_position,
)
from zealandia.core.politics.alignment import (
    CUBE_WEIGHT,
    AlignmentResult,
    Breakdown,
    CubeBreakdown,
    IssueBreakdown,
    alignment_breakdown,
    alignment_score,
)

__all__ = [
    "CUBE_AXES",
    "ISSUES",
    "PoliticalCube",
    "PoliticalPosition",
    "make_position",
    "validate_position",
    "CUBE_WEIGHT",
    "AlignmentResult",
    "Breakdown",
    "CubeBreakdown",
    "IssueBreakdown",
    "alignment_breakdown",
    "alignment_score",
]
