# ditachunk/models/types.py

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

# Type aliases
URIString = str
PathLike = Union[str, Path]


class ChunkToken(Enum):
    """Chunk directive tokens recognized on @chunk."""
    TO_CONTENT = "to-content"
    TO_NAVIGATION = "to-navigation"
    BY_TOPIC = "by-topic"
    BY_DOCUMENT = "by-document"
    SELECT_TOPIC = "select-topic"
    SELECT_DOCUMENT = "select-document"
    SELECT_BRANCH = "select-branch"

    @property
    def token(self) -> str:
        return self.value

    @classmethod
    def from_token(cls, token: str) -> Optional["ChunkToken"]:
        """Return the matching member, or None for unrecognized tokens."""
        try:
            return cls(token)
        except ValueError:
            return None


SELECT_TOKENS = (
    ChunkToken.SELECT_TOPIC,
    ChunkToken.SELECT_DOCUMENT,
    ChunkToken.SELECT_BRANCH,
)


class ProcessingPhase(Enum):
    """Phases of the chunk map pass"""
    TRANSFORMATION = "transformation"


@dataclass(frozen=True)
class ChunkDirective:
    """Resolved view of a node's @chunk tokens."""
    tokens: tuple = ()
    to_mode: Optional[ChunkToken] = None
    by_mode: str = ChunkToken.BY_DOCUMENT.token
    select_mode: Optional[ChunkToken] = None

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    def has(self, token: ChunkToken) -> bool:
        return token.token in self.tokens


@dataclass
class ChunkOperation:
    """
    Merge or split instruction handed to the topic compositor.

    ``operation`` is ``None`` for passthrough children collected under a
    to-content merge.
    """
    operation: Optional[ChunkToken]
    select: Optional[ChunkToken] = None
    src: Optional[URIString] = None
    dst: Optional[URIString] = None
    children: List["ChunkOperation"] = field(default_factory=list)

    def add_child(self, child: "ChunkOperation") -> "ChunkOperation":
        self.children.append(child)
        return self

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            'operation': self.operation.token if self.operation else None,
            'select': self.select.token if self.select else None,
            'src': self.src,
            'dst': self.dst,
            'children': [child.to_dict() for child in self.children],
        }


@dataclass
class FileInfo:
    """Batch registry entry: temporary URI, final result URI and format."""
    uri: URIString
    result: URIString
    format: Optional[str] = None


@dataclass
class LogContext:
    phase: ProcessingPhase
    element_id: Optional[str] = None
    map_id: Optional[str] = None


# Error types
class ProcessingError(Exception):
    """Custom error for processing failures"""
    def __init__(
        self,
        error_type: str,
        message: str,
        context: Union[str, Path],
        element_id: Optional[str] = None,
        stacktrace: Optional[str] = None
    ):
        self.error_type = error_type
        self.message = message
        self.context = context
        self.element_id = element_id
        self.stacktrace = stacktrace
        super().__init__(self.message)


class NamingSchemeError(ProcessingError):
    """Temporary file name scheme could not be resolved or constructed."""
    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(
            error_type="naming_scheme",
            message=message or f"Unknown temp file name scheme: {name}",
            context=name,
        )
        self.name = name


class ChunkTableError(ProcessingError):
    """A change or conflict table holds a non-absolute URI."""
    def __init__(self, table: str, key: str, value: str):
        super().__init__(
            error_type="chunk_table",
            message=f"{table} entry is not absolute: {key} -> {value}",
            context=table,
        )
