"""
Poker circuit points calculator

Stage scoring rules:
- Fixed base points for positions 1-9 (separate table for the final stage)
- Positions 10 and below earn a flat base of 1
- Every player also earns one point per player who finished below them
"""
from typing import Any, Dict, Iterable, List, Mapping

from pydantic import BaseModel, Field


# =====================================================
# Scoring tables
# =====================================================

# Normal stages (1-11)
NORMAL_STAGE_POINTS = {
    1: 46,
    2: 37,
    3: 29,
    4: 22,
    5: 16,
    6: 11,
    7: 7,
    8: 4,
    9: 2,
}

# Final stage (12)
FINAL_STAGE_POINTS = {
    1: 69,
    2: 55,
    3: 43,
    4: 33,
    5: 24,
    6: 16,
    7: 10,
    8: 6,
    9: 3,
}

# Base points for 10th place and below, both tables
POSITION_10_PLUS_BASE = 1

SCORING_TABLES = {
    "normal": NORMAL_STAGE_POINTS,
    "final": FINAL_STAGE_POINTS,
}

# Validation messages shown to the organizer
DUPLICATE_POSITION_ERROR = "Posições duplicadas não são permitidas"
DUPLICATE_PLAYER_ERROR = "Jogador não pode aparecer mais de uma vez na mesma etapa"
NON_CONSECUTIVE_ERROR = "Posições devem ser consecutivas começando do 1º lugar"


def get_scoring_table(is_final_stage: bool) -> Dict[int, int]:
    """Base point table for the stage type"""
    return SCORING_TABLES["final" if is_final_stage else "normal"]


def get_base_points(position: int, is_final_stage: bool = False) -> int:
    """Base points for a finishing position"""
    return get_scoring_table(is_final_stage).get(position, POSITION_10_PLUS_BASE)


# =====================================================
# Points calculation
# =====================================================

def calculate_points(
    position: int,
    total_participants: int,
    is_final_stage: bool = False
) -> int:
    """
    Points earned for one stage result

    Formula: base points + (total participants - position)

    Position and field size must already be validated by the caller
    (1 <= position <= total_participants).
    """
    eliminated_below = total_participants - position
    return get_base_points(position, is_final_stage) + eliminated_below


def calculate_all_position_points(
    positions: Iterable[int],
    total_participants: int,
    is_final_stage: bool = False
) -> Dict[int, int]:
    """Map each position to its points for a single stage"""
    return {
        position: calculate_points(position, total_participants, is_final_stage)
        for position in positions
    }


# =====================================================
# Stage result validation
# =====================================================

class StageValidationResult(BaseModel):
    """Outcome of validating one stage submission"""
    is_valid: bool = Field(default=True, description="True when no errors were found")
    errors: List[str] = Field(default_factory=list)


def _entry_value(entry: Any, key: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(key)
    return getattr(entry, key, None)


def validate_stage_results(entries: Iterable[Any]) -> StageValidationResult:
    """
    Validate a batch of (player_id, final_position) entries for one stage

    Every violation is reported:
    - the same position used twice
    - the same player listed twice
    - positions that are not exactly 1..N

    Entries may be mappings or objects with player_id/final_position attributes.
    """
    entries = list(entries)
    errors: List[str] = []

    positions = [_entry_value(e, "final_position") for e in entries]
    player_ids = [_entry_value(e, "player_id") for e in entries]

    if len(positions) != len(set(positions)):
        errors.append(DUPLICATE_POSITION_ERROR)

    if len(player_ids) != len(set(player_ids)):
        errors.append(DUPLICATE_PLAYER_ERROR)

    expected = list(range(1, len(positions) + 1))
    try:
        ordered = sorted(positions)
    except TypeError:
        # None or mixed types can never form 1..N
        ordered = None
    if ordered != expected:
        errors.append(NON_CONSECUTIVE_ERROR)

    return StageValidationResult(is_valid=not errors, errors=errors)
