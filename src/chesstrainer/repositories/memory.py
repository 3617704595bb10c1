"""In-memory stores guarded by a single lock each."""
import logging
import threading
import uuid
from typing import Dict, List, Optional

from chesstrainer.models.puzzle_models import (
    CreatePuzzle,
    CreateTrainingSet,
    Puzzle,
    RatingRange,
    ThemeChoice,
    TrainingSet,
)
from chesstrainer.repositories.base import PuzzleRepository, TrainingSetRepository
from chesstrainer.repositories.sampling import PuzzleSampler, UniformSampler

logger = logging.getLogger(__name__)


class InMemoryPuzzleRepository(PuzzleRepository):
    """Puzzle store keyed by an increasing integer.

    The id sequence and the puzzle map share one lock, so id assignment
    and insertion are atomic relative to every other call.
    """

    def __init__(self, sampler: Optional[PuzzleSampler] = None):
        self._lock = threading.Lock()
        self._puzzles: Dict[int, Puzzle] = {}
        self._id_sequence = 0
        self.sampler = sampler or UniformSampler()
        # Explicit theme choices are always sampled uniformly
        self._uniform = UniformSampler(self.sampler.rng)

    def create(self, puzzle: CreatePuzzle) -> Puzzle:
        with self._lock:
            self._id_sequence += 1
            stored = Puzzle.from_create(self._id_sequence, puzzle)
            self._puzzles[stored.id] = stored
            return stored

    def find(self) -> List[Puzzle]:
        with self._lock:
            return list(self._puzzles.values())

    def find_random(self, count: int, rating: RatingRange, themes: ThemeChoice) -> List[Puzzle]:
        with self._lock:
            candidates = [
                puzzle for puzzle in self._puzzles.values()
                if puzzle.lichess_rating in rating and themes.matches(puzzle.themes)
            ]
            sampler = self.sampler if themes.is_healthy_mix else self._uniform
            logger.debug(f"{len(candidates)} puzzles match rating {rating}")
            return sampler.sample(candidates, count)


class InMemoryTrainingSetRepository(TrainingSetRepository):
    """Training set store keyed by random UUIDs."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sets: Dict[str, TrainingSet] = {}

    def create(self, training_set: CreateTrainingSet) -> TrainingSet:
        with self._lock:
            stored = TrainingSet.from_create(str(uuid.uuid4()), training_set)
            self._sets[stored.id] = stored
            return stored

    def get(self, set_id: str) -> Optional[TrainingSet]:
        with self._lock:
            return self._sets.get(set_id)

    def find(self) -> List[TrainingSet]:
        with self._lock:
            return list(self._sets.values())
