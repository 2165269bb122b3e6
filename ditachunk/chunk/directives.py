# ditachunk/chunk/directives.py
"""Parse @chunk token sets into merge, split and select modes."""

from typing import Iterable, Optional

from ..models.types import SELECT_TOKENS, ChunkDirective, ChunkToken
from ..utils.dita_class import split_tokens

BY_PREFIX = "by-"
SELECT_PREFIX = "select-"


def get_chunk_by_token(tokens: Iterable[str], category: str,
                       default_token: Optional[str]) -> Optional[str]:
    """First token starting with ``category``, else ``default_token``."""
    for token in tokens:
        if token.startswith(category):
            return token
    return default_token


def get_select(tokens: Iterable[str]) -> Optional[ChunkToken]:
    for token in tokens:
        member = ChunkToken.from_token(token)
        if member in SELECT_TOKENS:
            return member
    return None


def get_to_mode(tokens: Iterable[str]) -> Optional[ChunkToken]:
    """to-content takes precedence over to-navigation."""
    tokens = set(tokens)
    if ChunkToken.TO_CONTENT.token in tokens:
        return ChunkToken.TO_CONTENT
    if ChunkToken.TO_NAVIGATION.token in tokens:
        return ChunkToken.TO_NAVIGATION
    return None


def default_by_token(root_tokens: Iterable[str]) -> str:
    """Inherited by-mode for a map, taken from its root element."""
    return get_chunk_by_token(root_tokens, BY_PREFIX, ChunkToken.BY_DOCUMENT.token)


def resolve(tokens, inherited_by_mode: str = ChunkToken.BY_DOCUMENT.token) -> ChunkDirective:
    """
    Resolve a token set against the inherited by-mode.

    ``tokens`` may be the raw attribute string or an iterable of tokens.
    Unknown tokens are kept in the directive but do not affect any mode.
    """
    if tokens is None or isinstance(tokens, str):
        tokens = split_tokens(tokens)
    else:
        tokens = tuple(dict.fromkeys(tokens))
    return ChunkDirective(
        tokens=tokens,
        to_mode=get_to_mode(tokens),
        by_mode=get_chunk_by_token(tokens, BY_PREFIX, inherited_by_mode),
        select_mode=get_select(tokens),
    )
