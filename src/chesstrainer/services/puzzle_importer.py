"""Import of the Lichess puzzle dataset (CSV)."""
import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from chesstrainer.errors import PuzzleImportError, PuzzleParseError
from chesstrainer.models.puzzle_models import LichessPuzzleImport, Theme
from chesstrainer.monitoring import puzzle_import_failures
from chesstrainer.services.puzzle_service import PuzzleService

logger = logging.getLogger(__name__)

# PuzzleId,FEN,Moves,Rating,RatingDeviation,Popularity,NbPlays,Themes,GameUrl[,OpeningTags]
COLUMNS = (
    "PuzzleId",
    "FEN",
    "Moves",
    "Rating",
    "RatingDeviation",
    "Popularity",
    "NbPlays",
    "Themes",
    "GameUrl",
)


@dataclass
class ImportReport:
    """Outcome of importing a dataset file."""
    imported: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.imported + self.failed


def _parse_int(row: Sequence[str], index: int, allow_negative: bool = True) -> int:
    raw = row[index].strip()
    try:
        value = int(raw)
    except ValueError:
        raise PuzzleParseError(f"{COLUMNS[index]} is not an integer: {raw!r}") from None
    if value < 0 and not allow_negative:
        raise PuzzleParseError(f"{COLUMNS[index]} must not be negative: {value}")
    return value


def parse_themes(raw: str) -> Tuple[Theme, ...]:
    """Parse a whitespace-delimited list of theme tokens."""
    themes = []
    for token in raw.split():
        try:
            themes.append(Theme(token))
        except ValueError:
            raise PuzzleParseError(f"Unknown theme: {token!r}") from None
    return tuple(themes)


def parse_row(row: Sequence[str]) -> LichessPuzzleImport:
    """Turn one CSV row into a LichessPuzzleImport.

    Columns past GameUrl are ignored. Range checks on popularity are left
    to PuzzleService.import_puzzle.
    """
    if len(row) < len(COLUMNS):
        raise PuzzleParseError(f"Expected at least {len(COLUMNS)} fields, got {len(row)}")

    return LichessPuzzleImport(
        puzzle_id=row[0],
        fen=row[1],
        moves=row[2],
        rating=_parse_int(row, 3, allow_negative=False),
        rating_deviation=_parse_int(row, 4, allow_negative=False),
        popularity=_parse_int(row, 5),
        play_count=_parse_int(row, 6, allow_negative=False),
        themes=parse_themes(row[7]),
        game_url=row[8],
    )


def decode_line(raw: bytes, encoding: str = "utf-8") -> List[str]:
    """Split one raw dataset line into its CSV fields."""
    try:
        text = raw.decode(encoding)
        return next(csv.reader([text]), [])
    except UnicodeDecodeError as e:
        raise PuzzleParseError(f"Invalid {encoding} at byte {e.start}") from None
    except csv.Error as e:
        raise PuzzleParseError(f"Malformed CSV: {e}") from None


def import_file(path: Union[str, Path], service: PuzzleService) -> ImportReport:
    """Import every row of a dataset file.

    Lines are decoded one by one so that a bad line, whether undecodable,
    malformed or invalid, is logged and skipped without stopping the import.
    """
    report = ImportReport()
    path = Path(path)
    logger.info(f"Importing puzzles from {path}")

    with path.open("rb") as f:
        for line_number, raw in enumerate(f, start=1):
            try:
                # A leading byte order mark would hide the header
                row = decode_line(raw, "utf-8-sig" if line_number == 1 else "utf-8")
                if not row:
                    continue
                if line_number == 1 and row[0] == COLUMNS[0]:
                    continue
                service.import_puzzle(parse_row(row))
            except PuzzleImportError as e:
                reason = "parse" if isinstance(e, PuzzleParseError) else "validation"
                puzzle_import_failures.labels(reason=reason).inc()
                logger.warning(f"Skipping line {line_number}: {e}")
                report.failed += 1
                continue
            report.imported += 1

    logger.info(f"Imported {report.imported} puzzles, skipped {report.failed} rows")
    return report
