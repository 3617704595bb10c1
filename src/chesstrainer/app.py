"""HTTP front-end for the puzzle service."""
import logging
import time
from typing import Generator, List, Literal, Optional, Union

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, model_validator

from chesstrainer.config import settings
from chesstrainer.errors import CreateTrainingSetError, RepositoryError
from chesstrainer.models.base import get_db, init_db
from chesstrainer.models.puzzle_models import (
    HEALTHY_MIX,
    CreateTrainingSetOptions,
    RatingRange,
    Theme,
    ThemeChoice,
)
from chesstrainer.monitoring import request_duration, start_monitoring
from chesstrainer.services.puzzle_service import PuzzleService, make_service

logger = logging.getLogger(__name__)


class RatingModel(BaseModel):
    """Inclusive rating band."""

    low: int = Field(ge=0)
    high: int = Field(ge=0)

    @model_validator(mode="after")
    def check_order(self) -> "RatingModel":
        if self.low > self.high:
            raise ValueError("rating.low must not exceed rating.high")
        return self


class CreateTrainingSetRequest(BaseModel):
    """Payload for assembling a training set."""

    name: str
    size: int
    rating: RatingModel
    themes: Union[Literal["healthyMix"], List[Theme]] = HEALTHY_MIX

    def to_options(self) -> CreateTrainingSetOptions:
        if self.themes == HEALTHY_MIX:
            themes = ThemeChoice.healthy_mix()
        else:
            themes = ThemeChoice.of(*self.themes)
        return CreateTrainingSetOptions(
            name=self.name,
            size=self.size,
            rating=RatingRange(self.rating.low, self.rating.high),
            themes=themes,
        )


class PuzzleResponse(BaseModel):
    id: int
    fen: str
    moves: str
    lichess_id: str
    lichess_rating: int
    lichess_rating_deviation: int
    lichess_popularity: int
    lichess_play_count: int
    themes: List[Theme]
    lichess_game_url: str


class TrainingSetResponse(BaseModel):
    id: str
    puzzle_ids: List[int]
    name: str
    rating: RatingModel
    themes: Union[Literal["healthyMix"], List[Theme]]
    current_progress: int
    cycles_done: int


def get_puzzle_service() -> Generator[PuzzleService, None, None]:
    """Provide a PuzzleService for one request."""
    if settings.storage.backend != "database":
        yield make_service()
        return

    sessions = get_db()
    try:
        yield make_service(next(sessions))
    finally:
        sessions.close()


def create_app(service: Optional[PuzzleService] = None) -> FastAPI:
    """Create the HTTP application.

    Args:
        service: Fixed service to use for every request. When omitted the
            service is wired from settings per request.
    """
    app = FastAPI(title="chesstrainer")

    if service is not None:
        app.dependency_overrides[get_puzzle_service] = lambda: service

    @app.middleware("http")
    async def record_duration(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        route = request.scope.get("route")
        handler = route.path if route is not None else "unmatched"
        request_duration.labels(handler=handler).observe(time.perf_counter() - start)
        return response

    @app.exception_handler(CreateTrainingSetError)
    async def handle_create_set_error(request: Request, exc: CreateTrainingSetError) -> JSONResponse:
        if isinstance(exc, RepositoryError):
            logger.error(f"Store failure while creating training set: {exc.cause}", exc_info=exc.cause)
            return JSONResponse(
                status_code=500,
                content={"error": exc.kind, "detail": "Internal server error."},
            )
        return JSONResponse(status_code=422, content={"error": exc.kind, "detail": str(exc)})

    @app.get("/puzzles", response_model=List[PuzzleResponse])
    def list_puzzles(service: PuzzleService = Depends(get_puzzle_service)):
        return [puzzle.to_dict() for puzzle in service.list_puzzles()]

    @app.post("/training-sets", response_model=TrainingSetResponse, status_code=201)
    def create_training_set(
        payload: CreateTrainingSetRequest,
        service: PuzzleService = Depends(get_puzzle_service),
    ):
        return service.create_set(payload.to_options()).to_dict()

    @app.get("/training-sets", response_model=List[TrainingSetResponse])
    def list_training_sets(service: PuzzleService = Depends(get_puzzle_service)):
        return [training_set.to_dict() for training_set in service.list_sets()]

    @app.get("/training-sets/{set_id}", response_model=TrainingSetResponse)
    def get_training_set(set_id: str, service: PuzzleService = Depends(get_puzzle_service)):
        training_set = service.get_set(set_id)
        if training_set is None:
            raise HTTPException(status_code=404, detail=f"Training set {set_id} not found")
        return training_set.to_dict()

    return app


def serve(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the HTTP application until interrupted."""
    host = host or settings.server.host
    port = port or settings.server.port

    if settings.storage.backend == "database":
        init_db()
        logger.info("Database initialized")

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics server listening on port {settings.monitoring.port}")

    logger.info(f"Starting HTTP server on {host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_config=None)
