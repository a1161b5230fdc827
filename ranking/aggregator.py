"""
Poker circuit ranking aggregator

Per-tournament standings built from stage results:
- total points, stages played, average points
- best / worst finishing position
- stage-by-stage breakdown for reports
"""
import json
from collections import defaultdict
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import List, Dict, Any, Optional, Iterable

from loguru import logger


# =====================================================
# Data classes
# =====================================================

@dataclass
class PlayerRanking:
    """One player's standing within one tournament"""
    player_id: int
    player_name: str
    pix_key: str
    total_points: int = 0
    stages_played: int = 0
    average_points: float = 0.0
    best_position: Optional[int] = None
    worst_position: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StageCell:
    """A player's result in a single stage (None when absent)"""
    stage_number: int
    final_position: Optional[int] = None
    points_earned: Optional[int] = None


@dataclass
class PlayerStageScores:
    player_id: int
    player_name: str
    stages: List[StageCell] = field(default_factory=list)


@dataclass
class StageScores:
    """Stage-by-stage points table for a tournament"""
    stages: List[Dict[str, Any]] = field(default_factory=list)
    players: List[PlayerStageScores] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def ranking_sort_key(ranking: PlayerRanking):
    """
    Sort order: points desc, best position asc, name

    A player without any recorded position sorts after every numeric position.
    """
    no_position = ranking.best_position is None
    return (
        -ranking.total_points,
        no_position,
        ranking.best_position if not no_position else 0,
        ranking.player_name,
    )


def visible_rankings(rankings: Iterable[PlayerRanking]) -> List[PlayerRanking]:
    """Rankings shown to the public: players who scored at least one point"""
    return [r for r in rankings if r.total_points > 0]


# =====================================================
# Aggregator
# =====================================================

class RankingAggregator:
    """Turns stored stage results into tournament standings"""

    def compute(
        self,
        players: Iterable[Dict[str, Any]],
        results: Iterable[Dict[str, Any]]
    ) -> List[PlayerRanking]:
        """
        Ranking rows for every active player

        Args:
            players: active players (id, full_name, pix_key)
            results: stage results of a single tournament
                     (player_id, final_position, points_earned)

        Returns:
            Rows sorted by ranking_sort_key, zero-point players included
        """
        players = list(players)
        active_ids = {p["id"] for p in players}

        results_by_player: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
        for r in results:
            if r.get("player_id") in active_ids:
                results_by_player[r["player_id"]].append(r)

        rankings: List[PlayerRanking] = []
        for player in players:
            player_results = results_by_player.get(player["id"], [])
            total_points = sum(r.get("points_earned") or 0 for r in player_results)
            stages_played = len(player_results)
            positions = [r["final_position"] for r in player_results if r.get("final_position") is not None]

            rankings.append(PlayerRanking(
                player_id=player["id"],
                player_name=player.get("full_name", ""),
                pix_key=player.get("pix_key", ""),
                total_points=total_points,
                stages_played=stages_played,
                average_points=round(total_points / stages_played, 2) if stages_played else 0,
                best_position=min(positions) if positions else None,
                worst_position=max(positions) if positions else None,
            ))

        rankings.sort(key=ranking_sort_key)
        logger.debug(f"Ranking computed: {len(rankings)} players, {sum(r.stages_played for r in rankings)} results")
        return rankings

    def stage_scores(
        self,
        players: Iterable[Dict[str, Any]],
        stages: Iterable[Dict[str, Any]],
        results: Iterable[Dict[str, Any]]
    ) -> StageScores:
        """
        Stage-by-stage breakdown over completed stages

        Every active player gets one cell per completed stage, in stage order.
        Players are listed in ranking order. With no completed stage there is
        nothing to break down and no player rows are returned.
        """
        players = list(players)
        results = list(results)
        completed = sorted(
            (s for s in stages if s.get("is_completed")),
            key=lambda s: s["stage_number"]
        )
        if not completed:
            return StageScores(stages=[], players=[])

        by_cell = {(r["player_id"], r["stage_id"]): r for r in results}

        rankings = self.compute(players, results)
        players_by_id = {p["id"]: p for p in players}

        rows: List[PlayerStageScores] = []
        for ranking in rankings:
            player = players_by_id[ranking.player_id]
            cells = []
            for stage in completed:
                result = by_cell.get((player["id"], stage["id"]))
                cells.append(StageCell(
                    stage_number=stage["stage_number"],
                    final_position=result.get("final_position") if result else None,
                    points_earned=result.get("points_earned") if result else None,
                ))
            rows.append(PlayerStageScores(
                player_id=player["id"],
                player_name=player.get("full_name", ""),
                stages=cells,
            ))

        return StageScores(
            stages=[
                {"id": s["id"], "stage_number": s["stage_number"], "name": s.get("name")}
                for s in completed
            ],
            players=rows,
        )


# =====================================================
# Reports
# =====================================================

def export_ranking(tournament: Dict[str, Any], rankings: List[PlayerRanking], output_file: str):
    """Write the visible ranking of a tournament to JSON"""
    shown = visible_rankings(rankings)

    export_data = {
        "meta": {
            "generated_at": datetime.now().isoformat(),
            "tournament_id": tournament.get("id"),
            "tournament_name": tournament.get("name"),
            "total_players": len(shown),
        },
        "rankings": [
            {"rank": i, **r.to_dict()}
            for i, r in enumerate(shown, 1)
        ],
    }

    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(export_data, f, ensure_ascii=False, indent=2)

    logger.info(f"Ranking exported: {output_file}")


def print_ranking_summary(rankings: List[PlayerRanking], title: str = "", top_n: int = 20):
    """Console ranking table"""
    shown = visible_rankings(rankings)

    print(f"\n{'='*64}")
    print(f" {title}")
    print(f"{'='*64}")
    print(f"{'Pos':>4} {'Player':<24} {'Points':>7} {'Stages':>6} {'Avg':>7} {'Best':>5} {'Worst':>5}")
    print(f"{'-'*64}")

    for i, r in enumerate(shown[:top_n], 1):
        name = r.player_name
        if len(name) > 22:
            name = name[:22] + ".."
        best = r.best_position if r.best_position is not None else "-"
        worst = r.worst_position if r.worst_position is not None else "-"
        print(f"{i:>4} {name:<24} {r.total_points:>7} {r.stages_played:>6} {r.average_points:>7.2f} {best:>5} {worst:>5}")
