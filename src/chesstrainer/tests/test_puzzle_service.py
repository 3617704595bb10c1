"""Tests for puzzle service."""
from typing import List

import pytest
from faker import Faker

from chesstrainer.config import settings
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
    Puzzle,
    RatingRange,
    Theme,
    ThemeChoice,
    TrainingSet,
)
from chesstrainer.repositories.base import PuzzleRepository, TrainingSetRepository
from chesstrainer.repositories.database import DatabasePuzzleRepository
from chesstrainer.repositories.memory import InMemoryPuzzleRepository
from chesstrainer.services.puzzle_service import PuzzleService, make_service

fake = Faker()

SET_ID = "e649d0cc-3244-483d-922a-e8269d006ffe"


def sample_puzzle(puzzle_id: int) -> Puzzle:
    return Puzzle(
        id=puzzle_id,
        fen="sample-fen",
        moves="sample-moves",
        lichess_id="sample-lichess-id",
        lichess_rating=1500,
        lichess_rating_deviation=50,
        lichess_popularity=50,
        lichess_play_count=1000,
        themes=(Theme.DISCOVERED_ATTACK, Theme.MATE_IN_2),
        lichess_game_url="sample-lichess-game-url",
    )


def sample_options(**overrides) -> CreateTrainingSetOptions:
    fields = dict(
        name="sample-training-set-name",
        size=10,
        rating=RatingRange(1500, 1600),
        themes=ThemeChoice.healthy_mix(),
    )
    fields.update(overrides)
    return CreateTrainingSetOptions(**fields)


@pytest.fixture
def puzzle_repository(mocker):
    """Mocked puzzle store."""
    return mocker.Mock(spec=PuzzleRepository)


@pytest.fixture
def training_set_repository(mocker):
    """Mocked training set store that echoes what it is given."""
    repository = mocker.Mock(spec=TrainingSetRepository)
    repository.create.side_effect = lambda create_set: TrainingSet.from_create(SET_ID, create_set)
    return repository


@pytest.fixture
def service(puzzle_repository, training_set_repository) -> PuzzleService:
    return PuzzleService(puzzle_repository, training_set_repository)


def stub_finds_random(puzzle_repository, limit: int = None, ids: List[int] = None) -> None:
    """Make find_random return ``min(count, limit)`` puzzles."""
    def find_random(count, rating, themes):
        available = ids if ids is not None else list(range(count))
        if limit is not None:
            available = available[:limit]
        return [sample_puzzle(puzzle_id) for puzzle_id in available[:count]]
    puzzle_repository.find_random.side_effect = find_random


def test_import_puzzle(service, puzzle_repository, make_lichess_puzzle) -> None:
    """Test importing a dataset puzzle hands the mapped fields to the store."""
    lichess_puzzle = make_lichess_puzzle()
    puzzle_repository.create.side_effect = lambda create_puzzle: Puzzle.from_create(7, create_puzzle)

    puzzle = service.import_puzzle(lichess_puzzle)

    puzzle_repository.create.assert_called_once_with(lichess_puzzle.to_create_puzzle())
    assert puzzle.id == 7
    assert puzzle.lichess_id == lichess_puzzle.puzzle_id
    assert puzzle.lichess_rating == lichess_puzzle.rating
    assert puzzle.lichess_rating_deviation == lichess_puzzle.rating_deviation
    assert puzzle.lichess_popularity == lichess_puzzle.popularity
    assert puzzle.lichess_play_count == lichess_puzzle.play_count
    assert puzzle.themes == lichess_puzzle.themes
    assert puzzle.lichess_game_url == lichess_puzzle.game_url


@pytest.mark.parametrize("popularity", [101, -101, 127, -128])
def test_import_puzzle_rejects_popularity_out_of_range(
    service, puzzle_repository, make_lichess_puzzle, popularity
) -> None:
    """Test popularity outside [-100, 100] is rejected without a store write."""
    with pytest.raises(PuzzleValidationError) as exc_info:
        service.import_puzzle(make_lichess_puzzle(puzzle_id="abc12", popularity=popularity))

    assert "abc12" in str(exc_info.value)
    assert str(popularity) in str(exc_info.value)
    puzzle_repository.create.assert_not_called()


@pytest.mark.parametrize("popularity", [100, -100, 0])
def test_import_puzzle_accepts_popularity_bounds(
    service, puzzle_repository, make_lichess_puzzle, popularity
) -> None:
    """Test the popularity bounds themselves are valid."""
    puzzle_repository.create.side_effect = lambda create_puzzle: Puzzle.from_create(1, create_puzzle)

    puzzle = service.import_puzzle(make_lichess_puzzle(popularity=popularity))

    assert puzzle.lichess_popularity == popularity


def test_import_puzzle_propagates_store_errors(service, puzzle_repository, make_lichess_puzzle) -> None:
    """Test store failures on import are not swallowed."""
    puzzle_repository.create.side_effect = RuntimeError("disk full")

    with pytest.raises(RuntimeError, match="disk full"):
        service.import_puzzle(make_lichess_puzzle())


def test_list_puzzles(service, puzzle_repository) -> None:
    """Test listing puzzles returns the store contents."""
    puzzle_repository.find.return_value = [sample_puzzle(1), sample_puzzle(2)]

    assert [puzzle.id for puzzle in service.list_puzzles()] == [1, 2]


def test_create_set(service, puzzle_repository, training_set_repository) -> None:
    """Test creating a set from a store with enough puzzles."""
    stub_finds_random(puzzle_repository)
    options = sample_options(name="My training set")

    training_set = service.create_set(options)

    assert training_set == TrainingSet(
        id=SET_ID,
        puzzle_ids=(0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
        name="My training set",
        rating=RatingRange(1500, 1600),
        themes=ThemeChoice.healthy_mix(),
        current_progress=0,
        cycles_done=0,
    )
    puzzle_repository.find_random.assert_called_once_with(10, options.rating, options.themes)
    training_set_repository.create.assert_called_once_with(
        CreateTrainingSet(
            puzzle_ids=tuple(range(10)),
            name="My training set",
            rating=options.rating,
            themes=options.themes,
            current_progress=0,
            cycles_done=0,
        )
    )


def test_create_set_keeps_store_order(service, puzzle_repository) -> None:
    """Test puzzle ids follow the store's sampling order, unsorted."""
    ids = [42, 7, 19, 3, 88]
    stub_finds_random(puzzle_repository, ids=ids)

    training_set = service.create_set(sample_options(size=5))

    assert training_set.puzzle_ids == tuple(ids)


def test_create_set_passes_explicit_themes(service, puzzle_repository) -> None:
    """Test the requested theme choice reaches the store and is echoed back."""
    stub_finds_random(puzzle_repository)
    themes = ThemeChoice.of(Theme.FORK, Theme.PIN)

    training_set = service.create_set(sample_options(themes=themes))

    assert puzzle_repository.find_random.call_args.args[2] == themes
    assert training_set.themes == themes


def test_create_set_with_empty_name(service, puzzle_repository) -> None:
    """Test an empty name is rejected."""
    with pytest.raises(EmptyName):
        service.create_set(sample_options(name=""))
    puzzle_repository.find_random.assert_not_called()


def test_create_set_with_name_too_long(service, puzzle_repository) -> None:
    """Test names longer than 100 bytes are rejected."""
    with pytest.raises(NameLengthLimitExceeded):
        service.create_set(sample_options(name="a" * 101))
    puzzle_repository.find_random.assert_not_called()


def test_create_set_with_name_at_limit(service, puzzle_repository) -> None:
    """Test a 100 byte name is accepted."""
    stub_finds_random(puzzle_repository)

    training_set = service.create_set(sample_options(name="a" * 100))

    assert len(training_set.name) == 100


def test_create_set_measures_name_in_utf8_bytes(service, puzzle_repository) -> None:
    """Test multi-byte characters count by their encoded length."""
    with pytest.raises(NameLengthLimitExceeded):
        service.create_set(sample_options(name="ą" * 60))
    puzzle_repository.find_random.assert_not_called()

    stub_finds_random(puzzle_repository)
    assert service.create_set(sample_options(name="ą" * 50)).name == "ą" * 50


@pytest.mark.parametrize("size", [4, 0, -1])
def test_create_set_with_size_too_small(service, puzzle_repository, size) -> None:
    """Test sizes below 5 are rejected."""
    with pytest.raises(SizeTooSmall):
        service.create_set(sample_options(size=size))
    puzzle_repository.find_random.assert_not_called()


def test_create_set_with_size_too_large(service, puzzle_repository) -> None:
    """Test sizes above 1000 are rejected."""
    with pytest.raises(SizeLimitExceeded):
        service.create_set(sample_options(size=1001))
    puzzle_repository.find_random.assert_not_called()


@pytest.mark.parametrize("size", [5, 1000])
def test_create_set_with_size_bounds(service, puzzle_repository, size) -> None:
    """Test the size bounds themselves are valid."""
    stub_finds_random(puzzle_repository)

    assert service.create_set(sample_options(size=size)).size == size


def test_create_set_checks_name_before_size(service) -> None:
    """Test the name checks win over the size checks."""
    with pytest.raises(EmptyName):
        service.create_set(sample_options(name="", size=1))
    with pytest.raises(NameLengthLimitExceeded):
        service.create_set(sample_options(name="a" * 101, size=5000))


def test_create_set_checks_minimum_size_first(service) -> None:
    """Test the minimum size check runs before the maximum one."""
    with pytest.raises(SizeTooSmall):
        service.create_set(sample_options(size=-5000))


def test_create_set_with_unmet_criteria(service, puzzle_repository, training_set_repository) -> None:
    """Test fewer matching puzzles than requested fails without storing a set."""
    stub_finds_random(puzzle_repository, limit=10)

    with pytest.raises(CriteriaUnmet):
        service.create_set(sample_options(size=20))
    training_set_repository.create.assert_not_called()


def test_create_set_with_seven_of_ten_puzzles(service, puzzle_repository, training_set_repository) -> None:
    """Test a store holding 7 matching puzzles cannot fill a set of 10."""
    stub_finds_random(puzzle_repository, limit=7)

    with pytest.raises(CriteriaUnmet):
        service.create_set(sample_options(name="My set", size=10))
    training_set_repository.create.assert_not_called()


def test_create_set_wraps_find_random_failure(service, puzzle_repository, training_set_repository) -> None:
    """Test store failures during sampling surface as RepositoryError."""
    cause = RuntimeError("connection lost")
    puzzle_repository.find_random.side_effect = cause

    with pytest.raises(RepositoryError) as exc_info:
        service.create_set(sample_options())

    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    assert str(exc_info.value) == "Repository error."
    training_set_repository.create.assert_not_called()


def test_create_set_wraps_create_failure(service, puzzle_repository, training_set_repository) -> None:
    """Test store failures while saving the set surface as RepositoryError."""
    stub_finds_random(puzzle_repository)
    cause = RuntimeError("constraint violated")
    training_set_repository.create.side_effect = cause

    with pytest.raises(RepositoryError) as exc_info:
        service.create_set(sample_options())

    assert exc_info.value.cause is cause


def test_create_set_errors_share_base_class(service) -> None:
    """Test every creation error can be caught through the base class."""
    with pytest.raises(CreateTrainingSetError) as exc_info:
        service.create_set(sample_options(name=""))

    assert exc_info.value.kind == "EmptyName"
    assert str(exc_info.value) == "Set name can't be blank."


def test_get_and_list_sets(service, training_set_repository) -> None:
    """Test read-back goes through the training set store."""
    stored = TrainingSet(
        id=SET_ID,
        puzzle_ids=(1, 2, 3, 4, 5),
        name=fake.word(),
        rating=RatingRange(1000, 1200),
        themes=ThemeChoice.healthy_mix(),
    )
    training_set_repository.get.return_value = stored
    training_set_repository.find.return_value = [stored]

    assert service.get_set(SET_ID) is stored
    training_set_repository.get.assert_called_once_with(SET_ID)
    assert service.list_sets() == [stored]


def test_make_service_shares_memory_service() -> None:
    """Test the memory backend hands out one service per process."""
    first = make_service()

    assert make_service() is first
    assert isinstance(first.puzzle_repository, InMemoryPuzzleRepository)


def test_make_service_database_backend(mocker, db) -> None:
    """Test the database backend wires stores around the given session."""
    mocker.patch.object(settings.storage, "backend", "database")

    with pytest.raises(ValueError):
        make_service()

    service = make_service(db)
    assert isinstance(service.puzzle_repository, DatabasePuzzleRepository)
    assert service.puzzle_repository.db is db


if __name__ == "__main__":
    pytest.main([__file__])
