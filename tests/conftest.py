"""
Pytest configuration and fixtures for Poker Circuit tests
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tests.fakes import FakeSupabaseClient
from database.supabase_client import CircuitDB
from app.service import CircuitService


@pytest.fixture(scope="function")
def fake_client():
    """Empty in-memory Supabase client"""
    return FakeSupabaseClient()


@pytest.fixture(scope="function")
def db(fake_client):
    return CircuitDB(client=fake_client)


@pytest.fixture(scope="function")
def service(db):
    return CircuitService(db=db)


@pytest.fixture(scope="function")
def sample_players():
    """Registration data for four players"""
    return [
        {"full_name": "Ana Souza", "pix_key": "ana@pix.com", "unique_identifier": "ANA01"},
        {"full_name": "Bruno Lima", "pix_key": "11999990000", "unique_identifier": "BRU02"},
        {"full_name": "Carla Dias", "pix_key": "carla@pix.com", "unique_identifier": "CAR03"},
        {"full_name": "Diego Alves", "pix_key": "diego@pix.com", "unique_identifier": "DIE04"},
    ]


@pytest.fixture(scope="function")
def seeded(fake_client, sample_players):
    """
    Fake store with four active players and one tournament (12 stages)

    Rows are written straight into the fake tables so tests that use this
    fixture do not depend on CircuitDB write paths.
    """
    for p in sample_players:
        fake_client.table("players").insert({**p, "is_active": True}).execute()

    tournament = fake_client.table("tournaments").insert({
        "name": "Circuito 2025",
        "year": 2025,
        "is_active": True,
    }).execute().data[0]

    fake_client.table("stages").insert([
        {
            "tournament_id": tournament["id"],
            "stage_number": n,
            "name": f"Etapa {n}",
            "is_final_stage": n == 12,
            "is_completed": False,
            "total_participants": 0,
        }
        for n in range(1, 13)
    ]).execute()

    return {
        "client": fake_client,
        "tournament_id": tournament["id"],
        "player_ids": [1, 2, 3, 4],
    }
