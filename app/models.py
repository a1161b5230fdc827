"""
Poker Circuit API Models

Pydantic request/response models
"""

from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator


# =============================================
# Players
# =============================================

class PlayerCreate(BaseModel):
    """Player registration"""
    full_name: str = Field(..., min_length=2, description="Nome completo")
    pix_key: str = Field(..., min_length=1, description="Chave PIX")
    unique_identifier: str = Field(..., min_length=1, description="Identificador único")


class PlayerUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2)
    pix_key: Optional[str] = Field(None, min_length=1)
    unique_identifier: Optional[str] = Field(None, min_length=1)


class Player(BaseModel):
    id: int
    full_name: str
    pix_key: str
    unique_identifier: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================
# Tournaments
# =============================================

class TournamentCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Nome do torneio")
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    year: Optional[int] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, v):
        """Form fields send '' for an unset date"""
        return v or None


class TournamentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    year: Optional[int] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, v):
        return v or None


class Tournament(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    year: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================
# Stages and results
# =============================================

class Stage(BaseModel):
    id: int
    tournament_id: int
    stage_number: int
    name: str
    stage_date: Optional[date] = None
    is_final_stage: bool = False
    is_completed: bool = False
    total_participants: int = 0


class StageResultEntry(BaseModel):
    """One submitted finishing position"""
    player_id: int
    final_position: int = Field(..., ge=1)


class StageResult(BaseModel):
    id: Optional[int] = None
    stage_id: int
    player_id: int
    final_position: int
    points_earned: int
    player_name: Optional[str] = None


# =============================================
# Ranking
# =============================================

class PlayerRankingRow(BaseModel):
    """Derived standing of a player within one tournament"""
    player_id: int
    player_name: str
    pix_key: str
    total_points: int
    stages_played: int
    average_points: float
    best_position: Optional[int] = None
    worst_position: Optional[int] = None


class StageScoreCell(BaseModel):
    stage_number: int
    final_position: Optional[int] = None
    points_earned: Optional[int] = None


class PlayerStageScoresRow(BaseModel):
    player_id: int
    player_name: str
    stages: List[StageScoreCell] = []


class StageHeader(BaseModel):
    id: int
    stage_number: int
    name: Optional[str] = None


class StageScoresResponse(BaseModel):
    stages: List[StageHeader] = []
    players: List[PlayerStageScoresRow] = []

