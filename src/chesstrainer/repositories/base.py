"""Store interfaces the puzzle service depends on."""
from abc import ABC, abstractmethod
from typing import List, Optional

from chesstrainer.models.puzzle_models import (
    CreatePuzzle,
    CreateTrainingSet,
    Puzzle,
    RatingRange,
    ThemeChoice,
    TrainingSet,
)


class PuzzleRepository(ABC):
    """Abstract interface for puzzle storage.

    Implementations assign identifiers on creation and answer criteria
    based random sampling.
    """

    @abstractmethod
    def create(self, puzzle: CreatePuzzle) -> Puzzle:
        """Store a puzzle.

        Args:
            puzzle: Puzzle fields without an identifier

        Returns:
            The stored Puzzle carrying its assigned identifier
        """
        pass

    @abstractmethod
    def find(self) -> List[Puzzle]:
        """Return all stored puzzles."""
        pass

    @abstractmethod
    def find_random(self, count: int, rating: RatingRange, themes: ThemeChoice) -> List[Puzzle]:
        """Pick up to ``count`` random puzzles matching the criteria.

        Args:
            count: Maximum number of puzzles to return
            rating: Inclusive rating band the puzzles must fall in
            themes: Thematic criterion, explicit themes or the healthy mix

        Returns:
            Distinct matching puzzles, fewer than ``count`` when not enough
            match. The order is not necessarily sorted.
        """
        pass


class TrainingSetRepository(ABC):
    """Abstract interface for training set storage."""

    @abstractmethod
    def create(self, training_set: CreateTrainingSet) -> TrainingSet:
        """Store a training set and return it with its assigned identifier."""
        pass

    @abstractmethod
    def get(self, set_id: str) -> Optional[TrainingSet]:
        """Get a training set by its identifier."""
        pass

    @abstractmethod
    def find(self) -> List[TrainingSet]:
        """Return all stored training sets."""
        pass
