"""Domain records for puzzles and training sets."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

HEALTHY_MIX = "healthyMix"


class Theme(Enum):
    """Puzzle motifs as tagged in the Lichess puzzle dataset."""
    ADVANCED_PAWN = "advancedPawn"
    ADVANTAGE = "advantage"
    ANASTASIA_MATE = "anastasiaMate"
    ARABIAN_MATE = "arabianMate"
    ATTACKING_F2_F7 = "attackingF2F7"
    ATTRACTION = "attraction"
    BACK_RANK_MATE = "backRankMate"
    BISHOP_ENDGAME = "bishopEndgame"
    BODEN_MATE = "bodenMate"
    CAPTURING_DEFENDER = "capturingDefender"
    CASTLING = "castling"
    CLEARANCE = "clearance"
    CRUSHING = "crushing"
    DEFENSIVE_MOVE = "defensiveMove"
    DEFLECTION = "deflection"
    DISCOVERED_ATTACK = "discoveredAttack"
    DOUBLE_BISHOP_MATE = "doubleBishopMate"
    DOUBLE_CHECK = "doubleCheck"
    DOVETAIL_MATE = "dovetailMate"
    EN_PASSANT = "enPassant"
    ENDGAME = "endgame"
    EQUALITY = "equality"
    EXPOSED_KING = "exposedKing"
    FORK = "fork"
    HANGING_PIECE = "hangingPiece"
    HOOK_MATE = "hookMate"
    INTERFERENCE = "interference"
    INTERMEZZO = "intermezzo"
    KINGSIDE_ATTACK = "kingsideAttack"
    KNIGHT_ENDGAME = "knightEndgame"
    LONG = "long"
    MASTER = "master"
    MASTER_VS_MASTER = "masterVsMaster"
    MATE = "mate"
    MATE_IN_1 = "mateIn1"
    MATE_IN_2 = "mateIn2"
    MATE_IN_3 = "mateIn3"
    MATE_IN_4 = "mateIn4"
    MATE_IN_5 = "mateIn5"
    MIDDLEGAME = "middlegame"
    ONE_MOVE = "oneMove"
    OPENING = "opening"
    PAWN_ENDGAME = "pawnEndgame"
    PIN = "pin"
    PROMOTION = "promotion"
    QUEEN_ENDGAME = "queenEndgame"
    QUEEN_ROOK_ENDGAME = "queenRookEndgame"
    QUEENSIDE_ATTACK = "queensideAttack"
    QUIET_MOVE = "quietMove"
    ROOK_ENDGAME = "rookEndgame"
    SACRIFICE = "sacrifice"
    SHORT = "short"
    SKEWER = "skewer"
    SMOTHERED_MATE = "smotheredMate"
    SUPER_GM = "superGM"
    TRAPPED_PIECE = "trappedPiece"
    UNDER_PROMOTION = "underPromotion"
    VERY_LONG = "veryLong"
    X_RAY_ATTACK = "xRayAttack"
    ZUGZWANG = "zugzwang"


@dataclass(frozen=True)
class ThemeChoice:
    """Thematic criterion for sampling puzzles.

    ``themes`` is None for the healthy mix, where the store decides how to
    balance motifs. Otherwise a puzzle matches when it carries at least one
    of the listed themes.
    """
    themes: Optional[Tuple[Theme, ...]] = None

    @classmethod
    def healthy_mix(cls) -> "ThemeChoice":
        return cls(None)

    @classmethod
    def of(cls, *themes: Theme) -> "ThemeChoice":
        # dict.fromkeys keeps first-seen order while dropping repeats
        return cls(tuple(dict.fromkeys(themes)))

    @property
    def is_healthy_mix(self) -> bool:
        return self.themes is None

    def matches(self, puzzle_themes: Tuple[Theme, ...]) -> bool:
        """Check whether a puzzle tagged with ``puzzle_themes`` satisfies the choice."""
        if self.themes is None:
            return True
        return any(theme in self.themes for theme in puzzle_themes)

    def to_data(self) -> Union[str, List[str]]:
        """Serializable form: the healthy mix marker or a list of theme values."""
        if self.themes is None:
            return HEALTHY_MIX
        return [theme.value for theme in self.themes]

    @classmethod
    def from_data(cls, data: Union[str, List[str]]) -> "ThemeChoice":
        """Create a ThemeChoice from its serialized form."""
        if data == HEALTHY_MIX:
            return cls.healthy_mix()
        if isinstance(data, str):
            raise ValueError(f"Unknown theme choice: {data}")
        return cls.of(*(Theme(value) for value in data))


@dataclass(frozen=True)
class RatingRange:
    """Inclusive rating band."""
    low: int
    high: int

    def __post_init__(self):
        if self.low < 0 or self.high < 0:
            raise ValueError("Rating bounds must not be negative")
        if self.low > self.high:
            raise ValueError(f"Rating range {self.low}..={self.high} is empty")

    def __contains__(self, rating: int) -> bool:
        return self.low <= rating <= self.high

    def __str__(self) -> str:
        return f"{self.low}..={self.high}"


@dataclass(frozen=True)
class CreatePuzzle:
    """Puzzle fields as handed to the puzzle store."""
    fen: str
    moves: str
    lichess_id: str
    lichess_rating: int
    lichess_rating_deviation: int
    lichess_popularity: int
    lichess_play_count: int
    themes: Tuple[Theme, ...]
    lichess_game_url: str


@dataclass(frozen=True)
class Puzzle:
    """A stored puzzle. Never mutated after creation."""
    id: int
    fen: str
    moves: str
    lichess_id: str
    lichess_rating: int
    lichess_rating_deviation: int
    lichess_popularity: int
    lichess_play_count: int
    themes: Tuple[Theme, ...]
    lichess_game_url: str

    @classmethod
    def from_create(cls, puzzle_id: int, puzzle: CreatePuzzle) -> "Puzzle":
        return cls(
            id=puzzle_id,
            fen=puzzle.fen,
            moves=puzzle.moves,
            lichess_id=puzzle.lichess_id,
            lichess_rating=puzzle.lichess_rating,
            lichess_rating_deviation=puzzle.lichess_rating_deviation,
            lichess_popularity=puzzle.lichess_popularity,
            lichess_play_count=puzzle.lichess_play_count,
            themes=tuple(puzzle.themes),
            lichess_game_url=puzzle.lichess_game_url,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fen": self.fen,
            "moves": self.moves,
            "lichess_id": self.lichess_id,
            "lichess_rating": self.lichess_rating,
            "lichess_rating_deviation": self.lichess_rating_deviation,
            "lichess_popularity": self.lichess_popularity,
            "lichess_play_count": self.lichess_play_count,
            "themes": [theme.value for theme in self.themes],
            "lichess_game_url": self.lichess_game_url,
        }


@dataclass(frozen=True)
class LichessPuzzleImport:
    """One row of the Lichess puzzle dataset after field parsing."""
    puzzle_id: str
    fen: str
    moves: str
    rating: int
    rating_deviation: int
    popularity: int
    play_count: int
    themes: Tuple[Theme, ...]
    game_url: str

    def to_create_puzzle(self) -> CreatePuzzle:
        return CreatePuzzle(
            fen=self.fen,
            moves=self.moves,
            lichess_id=self.puzzle_id,
            lichess_rating=self.rating,
            lichess_rating_deviation=self.rating_deviation,
            lichess_popularity=self.popularity,
            lichess_play_count=self.play_count,
            themes=tuple(self.themes),
            lichess_game_url=self.game_url,
        )


@dataclass(frozen=True)
class CreateTrainingSetOptions:
    """Request to assemble a training set."""
    name: str
    size: int
    rating: RatingRange
    themes: ThemeChoice = field(default_factory=ThemeChoice.healthy_mix)


@dataclass(frozen=True)
class CreateTrainingSet:
    """Training set fields as handed to the training set store."""
    puzzle_ids: Tuple[int, ...]
    name: str
    rating: RatingRange
    themes: ThemeChoice
    current_progress: int = 0
    cycles_done: int = 0


@dataclass(frozen=True)
class TrainingSet:
    """A stored training set.

    ``puzzle_ids`` references puzzles in the order the store sampled them.
    The progress counters start at zero and belong to the review workflow.
    """
    id: str
    puzzle_ids: Tuple[int, ...]
    name: str
    rating: RatingRange
    themes: ThemeChoice
    current_progress: int = 0
    cycles_done: int = 0

    @classmethod
    def from_create(cls, set_id: str, training_set: CreateTrainingSet) -> "TrainingSet":
        return cls(
            id=set_id,
            puzzle_ids=tuple(training_set.puzzle_ids),
            name=training_set.name,
            rating=training_set.rating,
            themes=training_set.themes,
            current_progress=training_set.current_progress,
            cycles_done=training_set.cycles_done,
        )

    @property
    def size(self) -> int:
        return len(self.puzzle_ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "puzzle_ids": list(self.puzzle_ids),
            "name": self.name,
            "rating": {"low": self.rating.low, "high": self.rating.high},
            "themes": self.themes.to_data(),
            "current_progress": self.current_progress,
            "cycles_done": self.cycles_done,
        }
