"""Database models for puzzles and training sets."""
from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Enum,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from chesstrainer.config import MAX_POPULARITY, MAX_SET_NAME_LENGTH, MIN_POPULARITY
from chesstrainer.models.base import Base, TimestampMixin
from chesstrainer.models.puzzle_models import (
    Puzzle,
    RatingRange,
    Theme,
    ThemeChoice,
    TrainingSet,
)


class PuzzleRecord(Base, TimestampMixin):
    """Puzzle model."""

    __tablename__ = "puzzles"
    __table_args__ = (
        CheckConstraint(
            f"lichess_popularity BETWEEN {MIN_POPULARITY} AND {MAX_POPULARITY}",
            name="ck_puzzles_popularity_range",
        ),
    )

    id = Column(Integer, primary_key=True)
    fen = Column(String, nullable=False)
    moves = Column(String, nullable=False)
    lichess_id = Column(String, nullable=False, index=True)
    lichess_rating = Column(Integer, nullable=False, index=True)
    lichess_rating_deviation = Column(Integer, nullable=False)
    lichess_popularity = Column(Integer, nullable=False)
    lichess_play_count = Column(Integer, nullable=False)
    lichess_game_url = Column(String, nullable=False)

    # Relationships
    themes = relationship(
        "PuzzleThemeRecord",
        back_populates="puzzle",
        order_by="PuzzleThemeRecord.position",
        cascade="all, delete-orphan",
    )

    def to_domain(self) -> Puzzle:
        return Puzzle(
            id=self.id,
            fen=self.fen,
            moves=self.moves,
            lichess_id=self.lichess_id,
            lichess_rating=self.lichess_rating,
            lichess_rating_deviation=self.lichess_rating_deviation,
            lichess_popularity=self.lichess_popularity,
            lichess_play_count=self.lichess_play_count,
            themes=tuple(tag.theme for tag in self.themes),
            lichess_game_url=self.lichess_game_url,
        )


class PuzzleThemeRecord(Base):
    """Puzzle-theme association model, one row per tag in dataset order."""

    __tablename__ = "puzzle_themes"

    puzzle_id = Column(Integer, ForeignKey("puzzles.id", ondelete="CASCADE"), primary_key=True)
    position = Column(Integer, primary_key=True)
    theme = Column(Enum(Theme, values_callable=lambda e: [t.value for t in e]), nullable=False, index=True)

    # Relationships
    puzzle = relationship("PuzzleRecord", back_populates="themes")


class TrainingSetRecord(Base, TimestampMixin):
    """Training set model."""

    __tablename__ = "training_sets"

    id = Column(String(36), primary_key=True)
    name = Column(String(MAX_SET_NAME_LENGTH), nullable=False)
    puzzle_ids = Column(JSON, nullable=False)  # ordered list of puzzle ids
    rating_low = Column(Integer, nullable=False)
    rating_high = Column(Integer, nullable=False)
    themes = Column(JSON, nullable=False)  # "healthyMix" or list of theme values
    current_progress = Column(Integer, default=0, nullable=False)
    cycles_done = Column(Integer, default=0, nullable=False)

    def to_domain(self) -> TrainingSet:
        return TrainingSet(
            id=self.id,
            puzzle_ids=tuple(self.puzzle_ids),
            name=self.name,
            rating=RatingRange(self.rating_low, self.rating_high),
            themes=ThemeChoice.from_data(self.themes),
            current_progress=self.current_progress,
            cycles_done=self.cycles_done,
        )
