# ditachunk/__init__.py
"""Chunk pass for DITA maps."""

from .config import ChunkConfig, load_config
from .chunk.job import Job
from .chunk.map_filter import ChunkMapFilter
from .chunk.naming import get_naming_scheme, register_naming_scheme
from .models.types import (
    ChunkOperation,
    ChunkToken,
    FileInfo,
    NamingSchemeError,
    ProcessingError,
)

__all__ = [
    "ChunkConfig",
    "ChunkMapFilter",
    "ChunkOperation",
    "ChunkToken",
    "FileInfo",
    "Job",
    "NamingSchemeError",
    "ProcessingError",
    "get_naming_scheme",
    "load_config",
    "register_naming_scheme",
]
