"""Service for importing puzzles and assembling training sets."""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from chesstrainer.config import (
    MAX_POPULARITY,
    MAX_SET_NAME_LENGTH,
    MAX_SET_SIZE,
    MIN_POPULARITY,
    MIN_SET_SIZE,
    settings,
)
from chesstrainer.errors import (
    CreateTrainingSetError,
    CriteriaUnmet,
    EmptyName,
    NameLengthLimitExceeded,
    PuzzleValidationError,
    RepositoryError,
    SizeLimitExceeded,
    SizeTooSmall,
)
from chesstrainer.models.puzzle_models import (
    CreateTrainingSet,
    CreateTrainingSetOptions,
    LichessPuzzleImport,
    Puzzle,
    TrainingSet,
)
from chesstrainer.monitoring import puzzles_imported, training_set_errors, training_sets_created
from chesstrainer.repositories.base import PuzzleRepository, TrainingSetRepository
from chesstrainer.repositories.database import DatabasePuzzleRepository, DatabaseTrainingSetRepository
from chesstrainer.repositories.memory import InMemoryPuzzleRepository, InMemoryTrainingSetRepository
from chesstrainer.repositories.sampling import get_sampler

logger = logging.getLogger(__name__)


class PuzzleService:
    """Service for the puzzle catalogue and training sets."""

    def __init__(self, puzzle_repository: PuzzleRepository, training_set_repository: TrainingSetRepository):
        """Initialize the service with its stores."""
        self.puzzle_repository = puzzle_repository
        self.training_set_repository = training_set_repository

    def import_puzzle(self, lichess_puzzle: LichessPuzzleImport) -> Puzzle:
        """Validate a dataset puzzle and store it."""
        if not MIN_POPULARITY <= lichess_puzzle.popularity <= MAX_POPULARITY:
            raise PuzzleValidationError(
                f"puzzle {lichess_puzzle.puzzle_id}: popularity {lichess_puzzle.popularity} "
                f"is out of range [{MIN_POPULARITY}, {MAX_POPULARITY}]."
            )
        puzzle = self.puzzle_repository.create(lichess_puzzle.to_create_puzzle())
        puzzles_imported.inc()
        logger.debug(f"Imported puzzle {lichess_puzzle.puzzle_id} as {puzzle.id}")
        return puzzle

    def list_puzzles(self) -> List[Puzzle]:
        """Get all puzzles in the catalogue."""
        return self.puzzle_repository.find()

    def create_set(self, options: CreateTrainingSetOptions) -> TrainingSet:
        """Assemble and store a training set.

        Checks run in a fixed order and the first failing one is raised:
        name, name length, minimum size, maximum size, then the store lookup
        and the criteria check. A set is never stored partially filled.

        Raises:
            CreateTrainingSetError: One of its subclasses naming the failed check
        """
        try:
            return self._assemble_set(options)
        except CreateTrainingSetError as e:
            training_set_errors.labels(error_type=e.kind).inc()
            raise

    def _assemble_set(self, options: CreateTrainingSetOptions) -> TrainingSet:
        if not options.name:
            raise EmptyName()
        if len(options.name.encode("utf-8")) > MAX_SET_NAME_LENGTH:
            raise NameLengthLimitExceeded()
        if options.size < MIN_SET_SIZE:
            raise SizeTooSmall()
        if options.size > MAX_SET_SIZE:
            raise SizeLimitExceeded()

        try:
            puzzles = self.puzzle_repository.find_random(options.size, options.rating, options.themes)
        except Exception as e:
            raise RepositoryError(e) from e

        if len(puzzles) != options.size:
            logger.info(
                f"Only {len(puzzles)} of {options.size} puzzles match rating {options.rating} "
                f"and themes {options.themes.to_data()}"
            )
            raise CriteriaUnmet()

        create_set = CreateTrainingSet(
            puzzle_ids=tuple(puzzle.id for puzzle in puzzles),
            name=options.name,
            rating=options.rating,
            themes=options.themes,
            current_progress=0,
            cycles_done=0,
        )
        try:
            training_set = self.training_set_repository.create(create_set)
        except Exception as e:
            raise RepositoryError(e) from e

        training_sets_created.inc()
        logger.info(f"Created training set {training_set.id} '{training_set.name}' with {training_set.size} puzzles")
        return training_set

    def get_set(self, set_id: str) -> Optional[TrainingSet]:
        """Get a training set by its ID."""
        return self.training_set_repository.get(set_id)

    def list_sets(self) -> List[TrainingSet]:
        """Get all training sets."""
        return self.training_set_repository.find()


_memory_service: Optional[PuzzleService] = None


def make_service(db: Optional[Session] = None) -> PuzzleService:
    """Wire a PuzzleService for the configured storage backend.

    The memory backend hands out one shared service per process. The
    database backend needs a session and builds a fresh service around it.
    """
    global _memory_service

    sampler = get_sampler(settings.storage.healthy_mix_strategy)
    if settings.storage.backend == "database":
        if db is None:
            raise ValueError("A database session is required for the database backend")
        return PuzzleService(DatabasePuzzleRepository(db, sampler), DatabaseTrainingSetRepository(db))

    if _memory_service is None:
        _memory_service = PuzzleService(InMemoryPuzzleRepository(sampler), InMemoryTrainingSetRepository())
    return _memory_service
