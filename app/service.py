"""
Poker Circuit Service

Validation, scoring and storage wired together for the API layer.
Raises app.errors types; routers translate them into responses.
"""

from typing import Optional, List, Dict, Any, Iterable

from loguru import logger

from database.supabase_client import CircuitDB
from ranking.calculator import calculate_points, validate_stage_results
from ranking.aggregator import RankingAggregator, PlayerRanking, StageScores
from .errors import CircuitValidationError, ConflictError, NotFoundError


DUPLICATE_IDENTIFIER_ERROR = "Identificador único já existe"
NOTHING_TO_UPDATE_ERROR = "Nenhum campo para atualizar"
EMPTY_RESULTS_ERROR = "Nenhum resultado informado para a etapa"

PLAYER_UPDATE_FIELDS = ("full_name", "pix_key", "unique_identifier")
TOURNAMENT_NULLABLE_FIELDS = ("description", "start_date", "end_date", "year")


class CircuitService:
    """Players, tournaments, stage results and rankings"""

    def __init__(self, db: Optional[CircuitDB] = None):
        self.db = db or CircuitDB()
        self.aggregator = RankingAggregator()

    # =============================================
    # Players
    # =============================================

    async def list_players(self) -> List[Dict[str, Any]]:
        return await self.db.get_active_players()

    async def create_player(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if await self.db.find_player_by_identifier(data["unique_identifier"]):
            raise ConflictError(DUPLICATE_IDENTIFIER_ERROR)
        return await self.db.insert_player(data)

    async def update_player(self, player_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partial update; only non-empty fields are written
        """
        updates = {k: data[k] for k in PLAYER_UPDATE_FIELDS if data.get(k)}
        if not updates:
            raise CircuitValidationError([NOTHING_TO_UPDATE_ERROR])

        if not await self.db.get_player(player_id):
            raise NotFoundError("player", player_id, "Jogador não encontrado")

        if "unique_identifier" in updates:
            existing = await self.db.find_player_by_identifier(
                updates["unique_identifier"], exclude_id=player_id
            )
            if existing:
                raise ConflictError(DUPLICATE_IDENTIFIER_ERROR)

        return await self.db.update_player(player_id, updates)

    async def deactivate_player(self, player_id: int) -> None:
        if not await self.db.deactivate_player(player_id):
            raise NotFoundError("player", player_id, "Jogador não encontrado")

    # =============================================
    # Tournaments
    # =============================================

    async def list_tournaments(self) -> List[Dict[str, Any]]:
        return await self.db.get_active_tournaments()

    async def create_tournament(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.db.insert_tournament(data)

    async def update_tournament(self, tournament_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partial update

        name is only written when non-empty; the optional fields are written
        whenever present, an empty value clearing them.
        """
        updates: Dict[str, Any] = {}
        if data.get("name"):
            updates["name"] = data["name"]
        for key in TOURNAMENT_NULLABLE_FIELDS:
            if key in data:
                updates[key] = data[key] or None

        if not updates:
            raise CircuitValidationError([NOTHING_TO_UPDATE_ERROR])

        await self._require_tournament(tournament_id)
        return await self.db.update_tournament(tournament_id, updates)

    async def delete_tournament(self, tournament_id: int) -> None:
        await self._require_tournament(tournament_id)
        await self.db.delete_tournament(tournament_id)

    async def _require_tournament(self, tournament_id: int) -> Dict[str, Any]:
        tournament = await self.db.get_tournament(tournament_id)
        if not tournament:
            raise NotFoundError("tournament", tournament_id, "Torneio não encontrado")
        return tournament

    # =============================================
    # Stages
    # =============================================

    async def list_stages(self, tournament_id: int) -> List[Dict[str, Any]]:
        await self._require_tournament(tournament_id)
        return await self.db.get_stages(tournament_id)

    async def _require_stage(self, stage_id: int) -> Dict[str, Any]:
        stage = await self.db.get_stage(stage_id)
        if not stage:
            raise NotFoundError("stage", stage_id, "Etapa não encontrada")
        return stage

    async def get_stage_results(self, stage_id: int) -> List[Dict[str, Any]]:
        await self._require_stage(stage_id)
        return await self.db.get_stage_results(stage_id)

    async def submit_stage_results(self, stage_id: int, entries: Iterable[Any]) -> List[Dict[str, Any]]:
        """
        Score and store a full result set for a stage

        The submission replaces whatever the stage held before. Nothing is
        written when validation fails.
        """
        entries = [
            e if isinstance(e, dict) else e.model_dump()
            for e in entries
        ]

        validation = validate_stage_results(entries)
        if not validation.is_valid:
            raise CircuitValidationError(validation.errors)
        if not entries:
            raise CircuitValidationError([EMPTY_RESULTS_ERROR])

        stage = await self._require_stage(stage_id)

        player_ids = [e["player_id"] for e in entries]
        known = {
            p["id"] for p in await self.db.get_players_by_ids(player_ids)
            if p.get("is_active", True)
        }
        missing = [pid for pid in player_ids if pid not in known]
        if missing:
            raise CircuitValidationError([
                f"Jogador {pid} não encontrado ou inativo" for pid in missing
            ])

        total_participants = len(entries)
        is_final_stage = bool(stage.get("is_final_stage"))
        rows = [
            {
                "player_id": e["player_id"],
                "final_position": e["final_position"],
                "points_earned": calculate_points(e["final_position"], total_participants, is_final_stage),
            }
            for e in entries
        ]

        logger.info(
            f"Submitting stage {stage_id} (#{stage.get('stage_number')}, "
            f"{'final' if is_final_stage else 'normal'}): {total_participants} players"
        )
        return await self.db.replace_stage_results(stage_id, rows, total_participants)

    async def clear_stage_results(self, stage_id: int) -> None:
        await self._require_stage(stage_id)
        await self.db.clear_stage_results(stage_id)

    # =============================================
    # Rankings
    # =============================================

    async def compute_ranking(self, tournament_id: int) -> List[PlayerRanking]:
        """Fresh ranking of a tournament from the stored results"""
        await self._require_tournament(tournament_id)
        players = await self.db.get_active_players()
        results = await self.db.get_tournament_results(tournament_id)
        return self.aggregator.compute(players, results)

    async def stage_scores(self, tournament_id: int) -> StageScores:
        await self._require_tournament(tournament_id)
        players = await self.db.get_active_players()
        stages = await self.db.get_stages(tournament_id)
        results = await self.db.get_tournament_results(tournament_id)
        return self.aggregator.stage_scores(players, stages, results)
