import pytest

from ditachunk.chunk import directives
from ditachunk.models.types import ChunkToken


def test_empty_directive_uses_inherited_by_mode():
    directive = directives.resolve(None, "by-topic")

    assert directive.is_empty
    assert directive.to_mode is None
    assert directive.by_mode == "by-topic"
    assert directive.select_mode is None


def test_explicit_by_token_overrides_inherited():
    directive = directives.resolve("by-document select-topic", "by-topic")

    assert directive.by_mode == "by-document"
    assert directive.select_mode == ChunkToken.SELECT_TOPIC


@pytest.mark.parametrize("value,expected", [
    ("to-content", ChunkToken.TO_CONTENT),
    ("to-navigation", ChunkToken.TO_NAVIGATION),
    ("to-navigation to-content", ChunkToken.TO_CONTENT),
    ("select-branch", None),
])
def test_to_mode(value, expected):
    assert directives.resolve(value).to_mode == expected


def test_unknown_tokens_are_ignored():
    directive = directives.resolve("frobnicate to-content by-topic", "by-document")

    assert directive.has(ChunkToken.TO_CONTENT)
    assert directive.has(ChunkToken.BY_TOPIC)
    assert directive.by_mode == "by-topic"
    assert directive.select_mode is None


def test_unknown_by_token_is_passed_through():
    assert directives.resolve("by-chapter").by_mode == "by-chapter"


def test_resolve_accepts_token_iterable():
    directive = directives.resolve(["to-content", "to-content", "select-document"])

    assert directive.tokens == ("to-content", "select-document")
    assert directive.select_mode == ChunkToken.SELECT_DOCUMENT


def test_default_by_token_from_root():
    assert directives.default_by_token(()) == "by-document"
    assert directives.default_by_token(("to-content",)) == "by-document"
    assert directives.default_by_token(("to-content", "by-topic")) == "by-topic"


def test_get_chunk_by_token_returns_first_match():
    tokens = ("select-topic", "select-branch")

    assert directives.get_chunk_by_token(tokens, "select-", None) == "select-topic"
    assert directives.get_chunk_by_token(tokens, "by-", None) is None
