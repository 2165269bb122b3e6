# ditachunk/chunk/naming.py
"""Temporary file name schemes, selected by name from a registry."""

import hashlib
import logging
import posixpath
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

from ..models.types import NamingSchemeError, URIString
from ..utils.uri import is_absolute, normalize, strip_fragment

logger = logging.getLogger(__name__)


class TempFileNameScheme:
    """Maps a result URI to a path relative to the temporary directory."""

    def __init__(self, base_dir: Optional[URIString] = None):
        self.base_dir = base_dir

    def set_base_dir(self, base_dir: URIString) -> None:
        self.base_dir = base_dir

    def generate_temp_file_name(self, src: URIString) -> URIString:
        raise NotImplementedError


class DefaultTempFileScheme(TempFileNameScheme):
    """Keep the path of the result relative to the input directory."""

    def generate_temp_file_name(self, src: URIString) -> URIString:
        if not is_absolute(src):
            raise ValueError(f"Result URI must be absolute: {src}")
        path = urlparse(normalize(strip_fragment(src))).path
        if self.base_dir is not None:
            base = urlparse(self.base_dir).path
            if not base.endswith("/"):
                base += "/"
            if path.startswith(base):
                return path[len(base):]
        return path.lstrip("/")


class FullPathTempFileScheme(TempFileNameScheme):
    """Use the full path of the result without the root."""

    def generate_temp_file_name(self, src: URIString) -> URIString:
        if not is_absolute(src):
            raise ValueError(f"Result URI must be absolute: {src}")
        path = urlparse(normalize(strip_fragment(src))).path
        return path.lstrip("/").replace(":", "")


class HashTempFileScheme(TempFileNameScheme):
    """Hash the result's directory and keep the file name."""

    def generate_temp_file_name(self, src: URIString) -> URIString:
        if not is_absolute(src):
            raise ValueError(f"Result URI must be absolute: {src}")
        uri = normalize(strip_fragment(src))
        directory, name = posixpath.split(urlparse(uri).path)
        digest = hashlib.sha1(directory.encode("utf-8")).hexdigest()
        return f"{digest}/{name}"


NamingSchemeFactory = Callable[[], TempFileNameScheme]

_SCHEMES: Dict[str, NamingSchemeFactory] = {
    "default": DefaultTempFileScheme,
    "full-path": FullPathTempFileScheme,
    "hash": HashTempFileScheme,
}


def register_naming_scheme(name: str, factory: NamingSchemeFactory) -> None:
    """Register a naming scheme factory under ``name``."""
    _SCHEMES[name] = factory


def naming_scheme_names():
    return sorted(_SCHEMES)


def get_naming_scheme(name: str, base_dir: Optional[URIString] = None) -> TempFileNameScheme:
    """
    Construct the naming scheme registered as ``name``.

    Raises:
        NamingSchemeError: name is unknown or the factory fails
    """
    factory = _SCHEMES.get(name)
    if factory is None:
        raise NamingSchemeError(name)
    try:
        scheme = factory()
    except Exception as e:
        raise NamingSchemeError(name, f"Failed to create temp file name scheme {name}: {e}") from e
    if not isinstance(scheme, TempFileNameScheme):
        raise NamingSchemeError(name, f"Factory for {name} did not return a TempFileNameScheme")
    if base_dir is not None:
        scheme.set_base_dir(base_dir)
    logger.debug(f"Using temp file name scheme {name}")
    return scheme
