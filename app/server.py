"""
Poker Circuit - FastAPI web server

Players, tournaments (12 stages each), stage results and rankings.
Data source: Supabase
"""
from functools import lru_cache
from typing import List

from fastapi import FastAPI, APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .config import server_config
from .errors import CircuitError, StorageError
from .models import (
    PlayerCreate,
    PlayerUpdate,
    Player,
    TournamentCreate,
    TournamentUpdate,
    Tournament,
    Stage,
    StageResult,
    StageResultEntry,
    PlayerRankingRow,
    StageScoresResponse,
)
from .service import CircuitService


@lru_cache()
def get_service() -> CircuitService:
    return CircuitService()


def ok(data=None, message: str = None) -> dict:
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


# FastAPI app
app = FastAPI(
    title="Poker Circuit",
    description="Circuito de poker: jogadores, torneios, etapas e ranking",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=server_config.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Error handlers ====================

@app.exception_handler(CircuitError)
async def circuit_error_handler(request: Request, exc: CircuitError):
    if isinstance(exc, StorageError):
        logger.error(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": f"Falha ao executar operação: {exc.operation}"}
        )

    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc)}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = [
        f"{'.'.join(str(loc) for loc in err['loc'] if loc != 'body')}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": ", ".join(messages)}
    )


router = APIRouter(prefix="/api")


@router.get("/health")
async def health():
    return {"success": True, "message": "Poker Circuit API is running"}


# ==================== Players ====================

@router.get("/players")
async def list_players(service: CircuitService = Depends(get_service)):
    players = await service.list_players()
    return ok([Player(**p).model_dump(mode="json") for p in players])


@router.post("/players")
async def create_player(payload: PlayerCreate, service: CircuitService = Depends(get_service)):
    player = await service.create_player(payload.model_dump())
    return ok(Player(**player).model_dump(mode="json"), "Jogador cadastrado com sucesso")


@router.put("/players/{player_id}")
async def update_player(player_id: int, payload: PlayerUpdate, service: CircuitService = Depends(get_service)):
    player = await service.update_player(player_id, payload.model_dump(exclude_unset=True))
    return ok(Player(**player).model_dump(mode="json"), "Jogador atualizado com sucesso")


@router.delete("/players/{player_id}")
async def delete_player(player_id: int, service: CircuitService = Depends(get_service)):
    await service.deactivate_player(player_id)
    return ok(message="Jogador removido com sucesso")


# ==================== Tournaments ====================

@router.get("/tournaments")
async def list_tournaments(service: CircuitService = Depends(get_service)):
    tournaments = await service.list_tournaments()
    return ok([Tournament(**t).model_dump(mode="json") for t in tournaments])


@router.post("/tournaments")
async def create_tournament(payload: TournamentCreate, service: CircuitService = Depends(get_service)):
    tournament = await service.create_tournament(payload.model_dump(mode="json"))
    return ok(Tournament(**tournament).model_dump(mode="json"), "Torneio criado com sucesso")


@router.put("/tournaments/{tournament_id}")
async def update_tournament(
    tournament_id: int,
    payload: TournamentUpdate,
    service: CircuitService = Depends(get_service)
):
    tournament = await service.update_tournament(tournament_id, payload.model_dump(mode="json", exclude_unset=True))
    return ok(Tournament(**tournament).model_dump(mode="json"), "Torneio atualizado com sucesso")


@router.delete("/tournaments/{tournament_id}")
async def delete_tournament(tournament_id: int, service: CircuitService = Depends(get_service)):
    await service.delete_tournament(tournament_id)
    return ok(message="Torneio excluído com sucesso")


@router.get("/tournaments/{tournament_id}/stages")
async def list_stages(tournament_id: int, service: CircuitService = Depends(get_service)):
    stages = await service.list_stages(tournament_id)
    return ok([Stage(**s).model_dump() for s in stages])


# ==================== Stage results ====================

@router.get("/stages/{stage_id}/results")
async def get_stage_results(stage_id: int, service: CircuitService = Depends(get_service)):
    results = await service.get_stage_results(stage_id)
    return ok([StageResult(**r).model_dump() for r in results])


@router.post("/stages/{stage_id}/results")
async def submit_stage_results(
    stage_id: int,
    payload: List[StageResultEntry],
    service: CircuitService = Depends(get_service)
):
    """
    Replace every result of a stage

    Points are computed from each position and the number of entries.
    """
    results = await service.submit_stage_results(stage_id, payload)
    return ok([StageResult(**r).model_dump() for r in results], "Resultados salvos com sucesso")


@router.delete("/stages/{stage_id}/results")
async def clear_stage_results(stage_id: int, service: CircuitService = Depends(get_service)):
    await service.clear_stage_results(stage_id)
    return ok(message="Resultados da etapa excluídos com sucesso")


# ==================== Ranking ====================

@router.get("/tournaments/{tournament_id}/ranking")
async def get_ranking(tournament_id: int, service: CircuitService = Depends(get_service)):
    """
    Tournament ranking

    Includes players without points; the display layer hides them.
    """
    rankings = await service.compute_ranking(tournament_id)
    return ok([PlayerRankingRow(**r.to_dict()).model_dump() for r in rankings])


@router.get("/tournaments/{tournament_id}/stage-scores")
async def get_stage_scores(tournament_id: int, service: CircuitService = Depends(get_service)):
    scores = await service.stage_scores(tournament_id)
    return ok(StageScoresResponse(**scores.to_dict()).model_dump())


app.include_router(router)
