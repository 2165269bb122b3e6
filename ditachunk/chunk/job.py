# ditachunk/chunk/job.py

import logging
from pathlib import Path
from typing import Dict, Optional, Set

from ..models.types import FileInfo, PathLike, URIString
from ..utils.uri import is_absolute, path_to_uri, resolve

PROPERTY_TEMP_FILE_NAME_SCHEME = "temp-file-name-scheme"


class Job:
    """
    Registry of every file in the current batch.

    FileInfo ``uri`` values are relative to the temporary directory,
    ``result`` values are absolute output URIs.
    """

    def __init__(
        self,
        temp_dir: PathLike,
        input_dir: Optional[PathLike] = None,
        properties: Optional[Dict[str, str]] = None
    ):
        self.logger = logging.getLogger(__name__)
        self.temp_dir = Path(temp_dir)
        self.input_dir = Path(input_dir) if input_dir is not None else self.temp_dir
        self.properties: Dict[str, str] = dict(properties or {})
        self._files: Dict[URIString, FileInfo] = {}

    @property
    def temp_dir_uri(self) -> URIString:
        uri = path_to_uri(self.temp_dir)
        return uri if uri.endswith("/") else uri + "/"

    @property
    def input_dir_uri(self) -> URIString:
        uri = path_to_uri(self.input_dir)
        return uri if uri.endswith("/") else uri + "/"

    def get_property(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.properties.get(name, default)

    def set_property(self, name: str, value: str) -> None:
        self.properties[name] = value

    def _key(self, uri: URIString) -> URIString:
        """Registry keys are temp-dir relative, absolute URIs are made relative."""
        base = self.temp_dir_uri
        if is_absolute(uri) and uri.startswith(base):
            return uri[len(base):]
        return uri

    def add(self, file_info: FileInfo) -> None:
        self.logger.debug(f"Register {file_info.uri} -> {file_info.result}")
        self._files[self._key(file_info.uri)] = file_info

    def get_file_info(self, uri: URIString) -> Optional[FileInfo]:
        return self._files.get(self._key(uri))

    def get_result(self, uri: URIString) -> URIString:
        """Output location registered for ``uri``, or ``uri`` itself."""
        file_info = self.get_file_info(uri)
        if file_info is not None and file_info.result is not None:
            return file_info.result
        return uri

    def results(self) -> Set[URIString]:
        """All output locations claimed in this batch."""
        return {fi.result for fi in self._files.values() if fi.result is not None}

    def absolute_temp(self, uri: URIString) -> URIString:
        return resolve(self.temp_dir_uri, uri)
