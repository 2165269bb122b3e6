# ditachunk/utils/uri.py
"""Helpers for the file URIs used as keys in the chunk tables."""

import posixpath
from pathlib import Path
from typing import Optional
from urllib.parse import urldefrag, urljoin, urlparse, urlunparse
from urllib.request import url2pathname

from ..models.types import PathLike, URIString


def to_uri(value: Optional[str]) -> Optional[URIString]:
    """Normalize an attribute value into a URI reference, or None if empty."""
    if value is None or value == "":
        return None
    return value.replace("\\", "/").replace(" ", "%20")


def path_to_uri(path: PathLike) -> URIString:
    """Absolute file URI for a filesystem path. Directories end with a slash."""
    path = Path(path).resolve()
    uri = path.as_uri()
    if path.is_dir() and not uri.endswith("/"):
        uri += "/"
    return uri


def is_absolute(uri: Optional[str]) -> bool:
    return uri is not None and urlparse(uri).scheme != ""


def resolve(base: URIString, ref: str) -> URIString:
    """Resolve ``ref`` against ``base`` and normalize dot segments."""
    return normalize(urljoin(base, ref))


def normalize(uri: URIString) -> URIString:
    parts = urlparse(uri)
    if not parts.path:
        return uri
    path = posixpath.normpath(parts.path)
    if parts.path.endswith("/") and not path.endswith("/"):
        path += "/"
    # posixpath keeps a leading double slash
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    return urlunparse(parts._replace(path=path))


def strip_fragment(uri: URIString) -> URIString:
    return urldefrag(uri)[0]


def get_fragment(uri: Optional[str]) -> Optional[str]:
    if uri is None or "#" not in uri:
        return None
    return uri.split("#", 1)[1]


def set_fragment(uri: URIString, fragment: Optional[str]) -> URIString:
    base = strip_fragment(uri)
    if fragment:
        return f"{base}#{fragment}"
    return base


def replace_extension(name: str, extension: str) -> str:
    stem, _ = posixpath.splitext(name)
    return stem + extension


def base_name(uri: URIString) -> str:
    """File name of ``uri`` without directory and extension."""
    path = urlparse(strip_fragment(uri)).path
    return posixpath.splitext(posixpath.basename(path))[0]


def file_name(uri: URIString) -> str:
    return posixpath.basename(urlparse(strip_fragment(uri)).path)


def to_file(uri: URIString) -> Path:
    """Filesystem path for a file URI, without its fragment."""
    return Path(url2pathname(urlparse(strip_fragment(uri)).path))


def get_relative_path(base: URIString, ref: URIString) -> URIString:
    """
    Relative reference from the directory of ``base`` to ``ref``.

    Returns ``ref`` unchanged if the two URIs differ in scheme or authority.
    """
    b = urlparse(base)
    r = urlparse(ref)
    if (b.scheme, b.netloc) != (r.scheme, r.netloc):
        return ref
    rel = posixpath.relpath(r.path or "/", posixpath.dirname(b.path) or "/")
    if r.fragment:
        rel = f"{rel}#{r.fragment}"
    return rel
