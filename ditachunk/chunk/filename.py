# ditachunk/chunk/filename.py
"""Generators for names of files produced by chunking."""

import itertools
import random
from typing import Callable, Dict


class ChunkFilenameGenerator:
    """Base class for chunk file name generators."""

    def generate_filename(self, prefix: str, extension: str) -> str:
        raise NotImplementedError


class RandomChunkFilenameGenerator(ChunkFilenameGenerator):
    """Random numeric suffix. Callers must check for collisions."""

    def __init__(self, seed=None):
        self._random = random.Random(seed)

    def generate_filename(self, prefix: str, extension: str) -> str:
        return f"{prefix}{self._random.randrange(2 ** 31 - 1)}{extension}"


class CounterChunkFilenameGenerator(ChunkFilenameGenerator):
    """Monotonically increasing suffix, unique within one generator."""

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)

    def generate_filename(self, prefix: str, extension: str) -> str:
        return f"{prefix}{next(self._counter)}{extension}"


_GENERATORS: Dict[str, Callable[[], ChunkFilenameGenerator]] = {
    "random": RandomChunkFilenameGenerator,
    "counter": CounterChunkFilenameGenerator,
}


def new_filename_generator(name: str = "counter") -> ChunkFilenameGenerator:
    """Create a fresh generator by name."""
    try:
        return _GENERATORS[name]()
    except KeyError:
        raise ValueError(f"Unknown chunk filename generator: {name}") from None


def filename_generator_names():
    return sorted(_GENERATORS)
