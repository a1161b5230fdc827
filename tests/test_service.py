"""
CircuitService tests: submission, clearing, rankings and error taxonomy
"""

import pytest

from app.errors import CircuitValidationError, ConflictError, NotFoundError, StorageError
from app.models import StageResultEntry
from ranking.calculator import DUPLICATE_PLAYER_ERROR, NON_CONSECUTIVE_ERROR


def entries(*pairs):
    return [{"player_id": pid, "final_position": pos} for pid, pos in pairs]


def totals(rankings):
    return {r.player_id: r.total_points for r in rankings}


class TestSubmitStageResults:

    @pytest.mark.asyncio
    async def test_points_use_entry_count(self, service, seeded):
        rows = await service.submit_stage_results(1, entries((1, 1), (2, 2), (3, 3)))

        points = {r["player_id"]: r["points_earned"] for r in rows}
        assert points == {1: 46 + 2, 2: 37 + 1, 3: 29}

        stage = await service.db.get_stage(1)
        assert stage["is_completed"] is True
        assert stage["total_participants"] == 3

    @pytest.mark.asyncio
    async def test_final_stage_table(self, service, seeded):
        rows = await service.submit_stage_results(12, entries((1, 1), (2, 2)))
        assert {r["player_id"]: r["points_earned"] for r in rows} == {1: 70, 2: 55}

    @pytest.mark.asyncio
    async def test_accepts_models(self, service, seeded):
        rows = await service.submit_stage_results(1, [
            StageResultEntry(player_id=2, final_position=1),
            StageResultEntry(player_id=1, final_position=2),
        ])
        assert len(rows) == 2

    @pytest.mark.asyncio
    async def test_invalid_batch_writes_nothing(self, service, seeded):
        await service.submit_stage_results(1, entries((1, 1)))

        with pytest.raises(CircuitValidationError) as exc_info:
            await service.submit_stage_results(1, entries((1, 1), (1, 3)))

        assert DUPLICATE_PLAYER_ERROR in exc_info.value.errors
        assert NON_CONSECUTIVE_ERROR in exc_info.value.errors
        # previous results untouched
        assert [r["player_id"] for r in await service.get_stage_results(1)] == [1]

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, service, seeded):
        with pytest.raises(CircuitValidationError):
            await service.submit_stage_results(1, [])

    @pytest.mark.asyncio
    async def test_unknown_stage(self, service, seeded):
        with pytest.raises(NotFoundError) as exc_info:
            await service.submit_stage_results(999, entries((1, 1)))
        assert exc_info.value.resource == "stage"

    @pytest.mark.asyncio
    async def test_unknown_or_inactive_player(self, service, seeded):
        await service.deactivate_player(4)

        with pytest.raises(CircuitValidationError) as exc_info:
            await service.submit_stage_results(1, entries((1, 1), (4, 2), (77, 3)))

        assert len(exc_info.value.errors) == 2

    @pytest.mark.asyncio
    async def test_resubmission_replaces(self, service, seeded):
        await service.submit_stage_results(1, entries((1, 1), (2, 2)))
        await service.submit_stage_results(1, entries((3, 1)))

        results = await service.get_stage_results(1)
        assert [(r["player_id"], r["points_earned"]) for r in results] == [(3, 46)]
        assert (await service.db.get_stage(1))["total_participants"] == 1


class TestRanking:

    @pytest.mark.asyncio
    async def test_unknown_tournament(self, service, seeded):
        with pytest.raises(NotFoundError):
            await service.compute_ranking(999)

    @pytest.mark.asyncio
    async def test_all_active_players_present(self, service, seeded):
        await service.submit_stage_results(1, entries((2, 1), (1, 2)))

        rankings = await service.compute_ranking(seeded["tournament_id"])
        assert [r.player_id for r in rankings][:2] == [2, 1]
        assert len(rankings) == 4
        assert totals(rankings)[3] == 0

    @pytest.mark.asyncio
    async def test_submit_then_clear_round_trip(self, service, seeded):
        tid = seeded["tournament_id"]
        await service.submit_stage_results(1, entries((1, 1), (2, 2)))
        before = totals(await service.compute_ranking(tid))

        await service.submit_stage_results(2, entries((2, 1), (3, 2), (1, 3)))
        during = totals(await service.compute_ranking(tid))
        assert during != before

        await service.clear_stage_results(2)
        assert totals(await service.compute_ranking(tid)) == before
        assert (await service.db.get_stage(2))["is_completed"] is False

    @pytest.mark.asyncio
    async def test_read_is_idempotent(self, service, seeded):
        tid = seeded["tournament_id"]
        await service.submit_stage_results(1, entries((1, 1), (2, 2), (3, 3)))

        first = [r.to_dict() for r in await service.compute_ranking(tid)]
        second = [r.to_dict() for r in await service.compute_ranking(tid)]
        assert first == second

    @pytest.mark.asyncio
    async def test_cross_tournament_isolation(self, service, seeded):
        tid = seeded["tournament_id"]
        await service.submit_stage_results(1, entries((1, 1), (2, 2)))
        before = totals(await service.compute_ranking(tid))

        other = await service.create_tournament({"name": "Outro"})
        other_stage = (await service.list_stages(other["id"]))[0]
        await service.submit_stage_results(other_stage["id"], entries((1, 1), (2, 2), (3, 3)))

        assert totals(await service.compute_ranking(tid)) == before
        assert totals(await service.compute_ranking(other["id"]))[3] == 29

    @pytest.mark.asyncio
    async def test_deactivated_player_leaves_ranking(self, service, seeded):
        tid = seeded["tournament_id"]
        await service.submit_stage_results(1, entries((1, 1), (2, 2)))
        await service.deactivate_player(1)

        rankings = await service.compute_ranking(tid)
        assert 1 not in totals(rankings)

    @pytest.mark.asyncio
    async def test_ranking_over_capped_reads(self, seeded):
        from app.service import CircuitService
        from database.supabase_client import CircuitDB

        client = seeded["client"]
        service = CircuitService(db=CircuitDB(client=client, page_size=5))
        for stage_id in (1, 2, 3, 4):
            await service.submit_stage_results(stage_id, entries((1, 1), (2, 2), (3, 3), (4, 4)))
        client.max_rows = 5

        rankings = await service.compute_ranking(seeded["tournament_id"])
        assert totals(rankings) == {1: 4 * 49, 2: 4 * 39, 3: 4 * 30, 4: 4 * 22}
        assert all(r.stages_played == 4 for r in rankings)

    @pytest.mark.asyncio
    async def test_stage_scores(self, service, seeded):
        tid = seeded["tournament_id"]
        await service.submit_stage_results(1, entries((1, 1), (2, 2)))
        await service.submit_stage_results(3, entries((2, 1)))

        scores = await service.stage_scores(tid)
        assert [s["stage_number"] for s in scores.stages] == [1, 3]
        assert scores.players[0].player_id == 2
        assert [c.points_earned for c in scores.players[0].stages] == [37, 46]


class TestPlayersAndTournaments:

    @pytest.mark.asyncio
    async def test_duplicate_identifier(self, service, seeded, sample_players):
        with pytest.raises(ConflictError):
            await service.create_player(sample_players[0])

    @pytest.mark.asyncio
    async def test_update_player(self, service, seeded):
        player = await service.update_player(1, {"pix_key": "nova@pix.com", "full_name": None})
        assert player["pix_key"] == "nova@pix.com"
        assert player["full_name"] == "Ana Souza"

    @pytest.mark.asyncio
    async def test_update_identifier_conflict(self, service, seeded):
        with pytest.raises(ConflictError):
            await service.update_player(1, {"unique_identifier": "BRU02"})
        # own identifier is fine
        await service.update_player(1, {"unique_identifier": "ANA01"})

    @pytest.mark.asyncio
    async def test_update_nothing(self, service, seeded):
        with pytest.raises(CircuitValidationError):
            await service.update_player(1, {})

    @pytest.mark.asyncio
    async def test_update_missing_player(self, service, seeded):
        with pytest.raises(NotFoundError):
            await service.update_player(404, {"pix_key": "x"})

    @pytest.mark.asyncio
    async def test_create_tournament_has_twelve_stages(self, service, seeded):
        tournament = await service.create_tournament({"name": "Novo", "description": ""})
        stages = await service.list_stages(tournament["id"])
        assert len(stages) == 12
        assert [s["stage_number"] for s in stages if s["is_final_stage"]] == [12]
        assert tournament["description"] is None

    @pytest.mark.asyncio
    async def test_update_tournament_clears_optional(self, service, seeded):
        tid = seeded["tournament_id"]
        tournament = await service.update_tournament(tid, {"year": None, "description": "Circuito anual"})
        assert tournament["year"] is None
        assert tournament["description"] == "Circuito anual"
        assert tournament["name"] == "Circuito 2025"

    @pytest.mark.asyncio
    async def test_delete_tournament_missing(self, service, seeded):
        with pytest.raises(NotFoundError):
            await service.delete_tournament(999)

    @pytest.mark.asyncio
    async def test_storage_failure_surfaces(self, service, seeded):
        seeded["client"].fail("stage_results", "insert")

        with pytest.raises(StorageError) as exc_info:
            await service.submit_stage_results(1, entries((1, 1)))
        assert exc_info.value.operation == "insert stage results"
