"""Test configuration."""
import os
import random
from pathlib import Path
from typing import Callable, Generator

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parents[3] / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from chesstrainer.models.base import init_db
from chesstrainer.models.puzzle_models import CreatePuzzle, LichessPuzzleImport, Theme
from chesstrainer.repositories.memory import (
    InMemoryPuzzleRepository,
    InMemoryTrainingSetRepository,
)
from chesstrainer.repositories.sampling import UniformSampler
from chesstrainer.services import puzzle_service as puzzle_service_module
from chesstrainer.services.puzzle_service import PuzzleService

fake = Faker()


@pytest.fixture(autouse=True)
def reset_shared_service():
    """Drop the process-wide memory service between tests."""
    puzzle_service_module._memory_service = None
    yield
    puzzle_service_module._memory_service = None


@pytest.fixture
def rng() -> random.Random:
    """Seeded random generator for deterministic sampling."""
    return random.Random(1234)


@pytest.fixture
def make_create_puzzle() -> Callable[..., CreatePuzzle]:
    """Factory for puzzle store input with sensible defaults."""
    def factory(**overrides) -> CreatePuzzle:
        fields = dict(
            fen="r6k/pp2r2p/4Rp1Q/3p4/8/1N1P2R1/PqP2bPP/7K b - - 0 24",
            moves="f2g3 e6e7 b2b1 b3c1 b1c1 h6c1",
            lichess_id=fake.pystr(min_chars=5, max_chars=5),
            lichess_rating=1500,
            lichess_rating_deviation=75,
            lichess_popularity=95,
            lichess_play_count=fake.random_int(min=0, max=100000),
            themes=(Theme.CRUSHING, Theme.HANGING_PIECE),
            lichess_game_url=fake.url(),
        )
        fields.update(overrides)
        return CreatePuzzle(**fields)
    return factory


@pytest.fixture
def make_lichess_puzzle() -> Callable[..., LichessPuzzleImport]:
    """Factory for parsed dataset rows."""
    def factory(**overrides) -> LichessPuzzleImport:
        fields = dict(
            puzzle_id="00sHx",
            fen="q3k1nr/1pp1nQpp/3p4/1P2p3/4P3/B1PP1b2/B5PP/5K2 b k - 0 17",
            moves="e8d7 a2e6 d7d8 f7f8",
            rating=1760,
            rating_deviation=80,
            popularity=83,
            play_count=72,
            themes=(Theme.MATE, Theme.MATE_IN_2, Theme.MIDDLEGAME, Theme.SHORT),
            game_url="https://lichess.org/yyznGmXs/black#34",
        )
        fields.update(overrides)
        return LichessPuzzleImport(**fields)
    return factory


@pytest.fixture
def puzzle_repository(rng: random.Random) -> InMemoryPuzzleRepository:
    """Empty in-memory puzzle store."""
    return InMemoryPuzzleRepository(UniformSampler(rng))


@pytest.fixture
def training_set_repository() -> InMemoryTrainingSetRepository:
    """Empty in-memory training set store."""
    return InMemoryTrainingSetRepository()


@pytest.fixture
def service(puzzle_repository, training_set_repository) -> PuzzleService:
    """Puzzle service over in-memory stores."""
    return PuzzleService(puzzle_repository, training_set_repository)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a session on a fresh in-memory SQLite database."""
    engine = create_engine("sqlite://")
    init_db(engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()
