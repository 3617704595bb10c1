"""SQLAlchemy backed stores."""
import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from chesstrainer.models.models import PuzzleRecord, PuzzleThemeRecord, TrainingSetRecord
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


class DatabasePuzzleRepository(PuzzleRepository):
    """Puzzle store on top of a database session.

    Identifiers come from the database, so they stay unique across restarts.
    The healthy mix is sampled in SQL when the uniform strategy is configured;
    any other strategy gets the rating-filtered candidates in Python.
    """

    def __init__(self, db: Session, sampler: Optional[PuzzleSampler] = None):
        """Initialize the repository with a database session."""
        self.db = db
        self.sampler = sampler or UniformSampler()

    def create(self, puzzle: CreatePuzzle) -> Puzzle:
        record = PuzzleRecord(
            fen=puzzle.fen,
            moves=puzzle.moves,
            lichess_id=puzzle.lichess_id,
            lichess_rating=puzzle.lichess_rating,
            lichess_rating_deviation=puzzle.lichess_rating_deviation,
            lichess_popularity=puzzle.lichess_popularity,
            lichess_play_count=puzzle.lichess_play_count,
            lichess_game_url=puzzle.lichess_game_url,
            themes=[
                PuzzleThemeRecord(position=position, theme=theme)
                for position, theme in enumerate(puzzle.themes)
            ],
        )
        try:
            self.db.add(record)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record.to_domain()

    def find(self) -> List[Puzzle]:
        records = (
            self.db.query(PuzzleRecord)
            .options(selectinload(PuzzleRecord.themes))
            .order_by(PuzzleRecord.id)
            .all()
        )
        return [record.to_domain() for record in records]

    def find_random(self, count: int, rating: RatingRange, themes: ThemeChoice) -> List[Puzzle]:
        query = (
            self.db.query(PuzzleRecord)
            .options(selectinload(PuzzleRecord.themes))
            .filter(PuzzleRecord.lichess_rating.between(rating.low, rating.high))
        )

        if not themes.is_healthy_mix:
            if not themes.themes:
                return []
            tagged = (
                select(PuzzleThemeRecord.puzzle_id)
                .where(PuzzleThemeRecord.theme.in_(themes.themes))
            )
            query = query.filter(PuzzleRecord.id.in_(tagged))
        elif not isinstance(self.sampler, UniformSampler):
            candidates = [record.to_domain() for record in query.all()]
            logger.debug(f"{len(candidates)} puzzles match rating {rating}")
            return self.sampler.sample(candidates, count)

        records = query.order_by(func.random()).limit(count).all()
        return [record.to_domain() for record in records]


class DatabaseTrainingSetRepository(TrainingSetRepository):
    """Training set store on top of a database session."""

    def __init__(self, db: Session):
        """Initialize the repository with a database session."""
        self.db = db

    def create(self, training_set: CreateTrainingSet) -> TrainingSet:
        record = TrainingSetRecord(
            id=str(uuid.uuid4()),
            name=training_set.name,
            puzzle_ids=list(training_set.puzzle_ids),
            rating_low=training_set.rating.low,
            rating_high=training_set.rating.high,
            themes=training_set.themes.to_data(),
            current_progress=training_set.current_progress,
            cycles_done=training_set.cycles_done,
        )
        try:
            self.db.add(record)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record.to_domain()

    def get(self, set_id: str) -> Optional[TrainingSet]:
        record = self.db.query(TrainingSetRecord).filter(TrainingSetRecord.id == set_id).first()
        return record.to_domain() if record else None

    def find(self) -> List[TrainingSet]:
        records = self.db.query(TrainingSetRecord).order_by(TrainingSetRecord.created_at).all()
        return [record.to_domain() for record in records]
