"""
Poker circuit ranking

Stage points calculation and per-tournament standings
"""
from .calculator import (
    calculate_points,
    calculate_all_position_points,
    validate_stage_results,
    get_base_points,
    StageValidationResult,
    NORMAL_STAGE_POINTS,
    FINAL_STAGE_POINTS,
    POSITION_10_PLUS_BASE,
)
from .aggregator import (
    RankingAggregator,
    PlayerRanking,
    StageScores,
    visible_rankings,
    export_ranking,
    print_ranking_summary,
)

__all__ = [
    "calculate_points",
    "calculate_all_position_points",
    "validate_stage_results",
    "get_base_points",
    "StageValidationResult",
    "NORMAL_STAGE_POINTS",
    "FINAL_STAGE_POINTS",
    "POSITION_10_PLUS_BASE",
    "RankingAggregator",
    "PlayerRanking",
    "StageScores",
    "visible_rankings",
    "export_ranking",
    "print_ranking_summary",
]
