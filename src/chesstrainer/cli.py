"""Command-line interface for the puzzle trainer."""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, List, Optional

import typer

from chesstrainer.config import settings
from chesstrainer.errors import CreateTrainingSetError, RepositoryError
from chesstrainer.logging_config import setup_logging
from chesstrainer.models.base import SessionLocal, init_db
from chesstrainer.models.puzzle_models import (
    CreateTrainingSetOptions,
    RatingRange,
    Theme,
    ThemeChoice,
)
from chesstrainer.services.puzzle_importer import import_file
from chesstrainer.services.puzzle_service import PuzzleService, make_service

logger = logging.getLogger(__name__)

app = typer.Typer(help="Chess puzzle catalogue and training sets")


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL")) -> None:
    """Configure logging before any command runs."""
    setup_logging("Starting chesstrainer ...", log_level)


@contextmanager
def open_service() -> Generator[PuzzleService, None, None]:
    """Wire a PuzzleService for the configured backend."""
    if settings.storage.backend != "database":
        yield make_service()
        return

    init_db()
    db = SessionLocal()
    try:
        yield make_service(db)
    finally:
        db.close()


@app.command("import")
def import_puzzles(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Lichess puzzle CSV"),
) -> None:
    """Import puzzles from a Lichess dataset file."""
    with open_service() as service:
        report = import_file(path, service)
    typer.echo(f"imported {report.imported} puzzles")


@app.command("create-set")
def create_set(
    name: str = typer.Option(..., "--name", help="Training set name"),
    size: int = typer.Option(..., "--size", help="Number of puzzles"),
    min_rating: int = typer.Option(..., "--min-rating", help="Lowest puzzle rating (inclusive)"),
    max_rating: int = typer.Option(..., "--max-rating", help="Highest puzzle rating (inclusive)"),
    themes: Optional[List[Theme]] = typer.Option(
        None, "--theme", help="Restrict to these themes; omit for a healthy mix"
    ),
) -> None:
    """Assemble a training set from the catalogue."""
    try:
        rating = RatingRange(min_rating, max_rating)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--min-rating/--max-rating")

    options = CreateTrainingSetOptions(
        name=name,
        size=size,
        rating=rating,
        themes=ThemeChoice.of(*themes) if themes else ThemeChoice.healthy_mix(),
    )

    with open_service() as service:
        try:
            training_set = service.create_set(options)
        except RepositoryError as e:
            logger.error(f"Store failure while creating training set: {e.cause}", exc_info=e.cause)
            typer.echo("Training set could not be stored.", err=True)
            raise typer.Exit(code=1)
        except CreateTrainingSetError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=1)

    typer.echo(f"created set {training_set.id} '{training_set.name}' with {training_set.size} puzzles")
    typer.echo(" ".join(str(puzzle_id) for puzzle_id in training_set.puzzle_ids))


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default SERVER_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (default SERVER_PORT)"),
) -> None:
    """Run the HTTP server."""
    from chesstrainer.app import serve as serve_http

    serve_http(host, port)


if __name__ == "__main__":
    app()
