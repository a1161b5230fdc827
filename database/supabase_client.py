"""
Supabase database client for the poker circuit
"""
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any, Iterable, Callable

from supabase import create_client, Client
from loguru import logger

from app.config import supabase_config
from app.errors import StorageError


TOTAL_STAGES = 12
FINAL_STAGE_NUMBER = 12

# PostgREST caps a response at max_rows (1000 by default)
PAGE_SIZE = 1000


# Singleton client
_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Supabase client instance (singleton)
    """
    global _supabase_client
    if _supabase_client is None:
        if not supabase_config.supabase_url or not supabase_config.supabase_key:
            raise ValueError("Set the SUPABASE_URL and SUPABASE_KEY environment variables")
        _supabase_client = create_client(
            supabase_config.supabase_url,
            supabase_config.supabase_key
        )
    return _supabase_client


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_stage_rows(tournament_id: int) -> List[Dict[str, Any]]:
    """The 12 stage rows created with every tournament"""
    return [
        {
            "tournament_id": tournament_id,
            "stage_number": number,
            "name": f"Etapa {number}",
            "is_final_stage": number == FINAL_STAGE_NUMBER,
            "is_completed": False,
            "total_participants": 0,
        }
        for number in range(1, TOTAL_STAGES + 1)
    ]


class CircuitDB:
    """Supabase access for players, tournaments, stages and stage results"""

    def __init__(self, client: Optional[Client] = None, page_size: int = PAGE_SIZE):
        self.client: Client = client or get_supabase_client()
        self.page_size = page_size

    def _execute(self, operation: str, query):
        """Run a query, wrapping any failure with the attempted operation"""
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"{operation} failed: {e}")
            raise StorageError(operation, e) from e

    def _fetch_all(self, operation: str, build_query: Callable[[], Any]) -> List[Dict[str, Any]]:
        """
        Read every row of a select, one page at a time

        build_query must return a fresh, totally ordered select on each call.
        """
        rows: List[Dict[str, Any]] = []
        offset = 0

        while True:
            result = self._execute(
                operation,
                build_query().range(offset, offset + self.page_size - 1)
            )
            page = result.data or []
            rows.extend(page)
            if len(page) < self.page_size:
                break
            offset += self.page_size

        if offset:
            logger.debug(f"{operation}: {len(rows)} rows in {offset // self.page_size + 1} pages")
        return rows

    # ==================== Players ====================

    async def get_active_players(self) -> List[Dict[str, Any]]:
        """Active players ordered by name"""
        return self._fetch_all(
            "fetch active players",
            lambda: self.client.table("players").select("*").eq("is_active", True).order("full_name").order("id")
        )

    async def get_player(self, player_id: int) -> Optional[Dict[str, Any]]:
        result = self._execute(
            "fetch player",
            self.client.table("players").select("*").eq("id", player_id)
        )
        return result.data[0] if result.data else None

    async def get_players_by_ids(self, player_ids: Iterable[int]) -> List[Dict[str, Any]]:
        ids = list(set(player_ids))
        if not ids:
            return []
        return self._fetch_all(
            "fetch players by id",
            lambda: self.client.table("players").select("*").in_("id", ids).order("id")
        )

    async def find_player_by_identifier(
        self,
        unique_identifier: str,
        exclude_id: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        """Player holding a unique identifier, optionally ignoring one player"""
        query = self.client.table("players").select("id").eq("unique_identifier", unique_identifier)
        if exclude_id is not None:
            query = query.neq("id", exclude_id)

        result = self._execute("fetch player by identifier", query)
        return result.data[0] if result.data else None

    async def insert_player(self, data: Dict[str, Any]) -> Dict[str, Any]:
        row = {
            "full_name": data["full_name"],
            "pix_key": data["pix_key"],
            "unique_identifier": data["unique_identifier"],
            "is_active": True,
        }
        result = self._execute(
            "insert player",
            self.client.table("players").insert(row)
        )
        logger.info(f"Player created: {row['full_name']}")
        return result.data[0]

    async def update_player(self, player_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        result = self._execute(
            "update player",
            self.client.table("players").update({**data, "updated_at": _now()}).eq("id", player_id)
        )
        return result.data[0] if result.data else None

    async def deactivate_player(self, player_id: int) -> bool:
        """Soft delete: results stay, the player leaves rankings"""
        result = self._execute(
            "deactivate player",
            self.client.table("players").update({
                "is_active": False,
                "updated_at": _now()
            }).eq("id", player_id)
        )
        logger.info(f"Player deactivated: {player_id}")
        return len(result.data or []) > 0

    # ==================== Tournaments ====================

    async def get_active_tournaments(self) -> List[Dict[str, Any]]:
        """Active tournaments, newest first"""
        result = self._execute(
            "fetch tournaments",
            self.client.table("tournaments").select("*").eq("is_active", True).order("created_at", desc=True)
        )
        return result.data or []

    async def get_tournament(self, tournament_id: int) -> Optional[Dict[str, Any]]:
        result = self._execute(
            "fetch tournament",
            self.client.table("tournaments").select("*").eq("id", tournament_id)
        )
        return result.data[0] if result.data else None

    async def insert_tournament(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a tournament together with its 12 stages"""
        row = {
            "name": data["name"],
            "description": data.get("description") or None,
            "start_date": data.get("start_date") or None,
            "end_date": data.get("end_date") or None,
            "year": data.get("year") or None,
            "is_active": True,
        }
        result = self._execute(
            "insert tournament",
            self.client.table("tournaments").insert(row)
        )
        tournament = result.data[0]

        try:
            self._execute(
                "insert tournament stages",
                self.client.table("stages").insert(build_stage_rows(tournament["id"]))
            )
        except StorageError:
            # a tournament never exists without its stages
            self._execute(
                "remove tournament without stages",
                self.client.table("tournaments").delete().eq("id", tournament["id"])
            )
            logger.warning(f"Tournament {tournament['id']} removed after stage insert failure")
            raise
        logger.info(f"Tournament created: {tournament['name']} ({TOTAL_STAGES} stages)")
        return tournament

    async def update_tournament(self, tournament_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        result = self._execute(
            "update tournament",
            self.client.table("tournaments").update({**data, "updated_at": _now()}).eq("id", tournament_id)
        )
        return result.data[0] if result.data else None

    async def delete_tournament(self, tournament_id: int) -> None:
        """Delete a tournament with its stages and their results"""
        stages = await self.get_stages(tournament_id)
        stage_ids = [s["id"] for s in stages]

        if stage_ids:
            self._execute(
                "delete tournament results",
                self.client.table("stage_results").delete().in_("stage_id", stage_ids)
            )
        self._execute(
            "delete tournament stages",
            self.client.table("stages").delete().eq("tournament_id", tournament_id)
        )
        self._execute(
            "delete tournament",
            self.client.table("tournaments").delete().eq("id", tournament_id)
        )
        logger.info(f"Tournament deleted: {tournament_id} ({len(stage_ids)} stages)")

    # ==================== Stages ====================

    async def get_stages(self, tournament_id: int) -> List[Dict[str, Any]]:
        result = self._execute(
            "fetch stages",
            self.client.table("stages").select("*").eq("tournament_id", tournament_id).order("stage_number")
        )
        return result.data or []

    async def get_stage(self, stage_id: int) -> Optional[Dict[str, Any]]:
        result = self._execute(
            "fetch stage",
            self.client.table("stages").select("*").eq("id", stage_id)
        )
        return result.data[0] if result.data else None

    # ==================== Stage results ====================

    async def get_stage_results(self, stage_id: int) -> List[Dict[str, Any]]:
        """Results of one stage by position, with player names"""
        rows = self._fetch_all(
            "fetch stage results",
            lambda: self.client.table("stage_results").select("*").eq("stage_id", stage_id).order("final_position").order("id")
        )

        players = await self.get_players_by_ids(r["player_id"] for r in rows)
        names = {p["id"]: p.get("full_name", "") for p in players}
        return [{**r, "player_name": names.get(r["player_id"], "")} for r in rows]

    async def get_tournament_results(self, tournament_id: int) -> List[Dict[str, Any]]:
        """Every stage result recorded under a tournament"""
        stages = await self.get_stages(tournament_id)
        if not stages:
            return []

        stage_numbers = {s["id"]: s["stage_number"] for s in stages}
        rows = self._fetch_all(
            "fetch tournament results",
            lambda: self.client.table("stage_results").select("*").in_("stage_id", list(stage_numbers)).order("id")
        )
        return [
            {**r, "stage_number": stage_numbers.get(r["stage_id"])}
            for r in rows
        ]

    async def replace_stage_results(
        self,
        stage_id: int,
        rows: List[Dict[str, Any]],
        total_participants: int
    ) -> List[Dict[str, Any]]:
        """
        Replace every result of a stage

        Order: delete old rows, insert the new set in one statement, mark the
        stage completed. An interrupted run is repaired by clearing and
        resubmitting the stage.
        """
        self._execute(
            "delete stage results",
            self.client.table("stage_results").delete().eq("stage_id", stage_id)
        )

        inserted: List[Dict[str, Any]] = []
        if rows:
            result = self._execute(
                "insert stage results",
                self.client.table("stage_results").insert([
                    {**row, "stage_id": stage_id} for row in rows
                ])
            )
            inserted = result.data or []

        self._execute(
            "complete stage",
            self.client.table("stages").update({
                "is_completed": True,
                "total_participants": total_participants,
                "updated_at": _now()
            }).eq("id", stage_id)
        )
        logger.info(f"Stage {stage_id} results saved: {len(inserted)} players")
        return inserted

    async def clear_stage_results(self, stage_id: int) -> None:
        """Remove every result and reset the stage to pending"""
        self._execute(
            "delete stage results",
            self.client.table("stage_results").delete().eq("stage_id", stage_id)
        )
        self._execute(
            "reset stage",
            self.client.table("stages").update({
                "is_completed": False,
                "total_participants": 0,
                "updated_at": _now()
            }).eq("id", stage_id)
        )
        logger.info(f"Stage {stage_id} results cleared")

    # ==================== Stats ====================

    async def get_stats(self) -> Dict[str, int]:
        """Row count per table"""
        stats = {}

        tables = ["players", "tournaments", "stages", "stage_results"]
        for table in tables:
            result = self._execute(
                f"count {table}",
                self.client.table(table).select("id", count="exact")
            )
            stats[table] = result.count or 0

        return stats
