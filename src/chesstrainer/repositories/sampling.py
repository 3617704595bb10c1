"""Sampling strategies for the healthy mix theme choice."""
import logging
import random
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Optional

from chesstrainer.config import settings
from chesstrainer.models.puzzle_models import Puzzle, Theme

logger = logging.getLogger(__name__)


class PuzzleSampler(ABC):
    """Chooses puzzles without replacement from a list of candidates."""

    name: str = ""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @abstractmethod
    def sample(self, candidates: List[Puzzle], count: int) -> List[Puzzle]:
        """Return at most ``count`` distinct puzzles from ``candidates``."""
        pass


class UniformSampler(PuzzleSampler):
    """Every candidate is equally likely to be chosen."""

    name = "uniform"

    def sample(self, candidates: List[Puzzle], count: int) -> List[Puzzle]:
        return self.rng.sample(candidates, min(len(candidates), count))


class ThemeBalancedSampler(PuzzleSampler):
    """Draws puzzles round-robin across themes so no motif dominates.

    Candidates are bucketed by each theme they carry (untagged puzzles share
    one bucket). Every round visits the buckets in random order and takes one
    puzzle not chosen yet from each.
    """

    name = "theme_balanced"

    def sample(self, candidates: List[Puzzle], count: int) -> List[Puzzle]:
        buckets: Dict[Optional[Theme], List[Puzzle]] = defaultdict(list)
        for puzzle in candidates:
            if not puzzle.themes:
                buckets[None].append(puzzle)
            for theme in dict.fromkeys(puzzle.themes):
                buckets[theme].append(puzzle)
        for bucket in buckets.values():
            self.rng.shuffle(bucket)

        order = list(buckets.keys())
        self.rng.shuffle(order)

        chosen: List[Puzzle] = []
        chosen_ids = set()
        while len(chosen) < count and order:
            for theme in list(order):
                bucket = buckets[theme]
                while bucket and bucket[-1].id in chosen_ids:
                    bucket.pop()
                if not bucket:
                    order.remove(theme)
                    continue
                puzzle = bucket.pop()
                chosen.append(puzzle)
                chosen_ids.add(puzzle.id)
                if len(chosen) == count:
                    break
        logger.debug(f"Sampled {len(chosen)} puzzles across {len(buckets)} theme buckets")
        return chosen


SAMPLERS = {
    UniformSampler.name: UniformSampler,
    ThemeBalancedSampler.name: ThemeBalancedSampler,
}


def get_sampler(name: Optional[str] = None, rng: Optional[random.Random] = None) -> PuzzleSampler:
    """Create the sampler registered under ``name`` (defaults to the configured one)."""
    name = name or settings.storage.healthy_mix_strategy
    sampler_class = SAMPLERS.get(name)
    if sampler_class is None:
        raise ValueError(f"Unknown sampling strategy: {name}")
    return sampler_class(rng)
