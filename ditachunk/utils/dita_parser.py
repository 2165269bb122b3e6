# ditachunk/utils/dita_parser.py

import logging
from pathlib import Path
from typing import Optional

from lxml import etree

from ..models.types import PathLike


class DITAParser:
    """Parser for maps and topics read during the chunk pass."""

    def __init__(self, recover: bool = False):
        self.logger = logging.getLogger(__name__)
        self.parser = etree.XMLParser(
            recover=recover,
            remove_blank_text=False,
            resolve_entities=False,
            dtd_validation=False,
            load_dtd=False,
            no_network=True
        )

    def parse_file(self, path: PathLike) -> etree._Element:
        """
        Parse a DITA file and return its document element.

        Raises:
            OSError: file cannot be read
            etree.XMLSyntaxError: file is not well-formed
        """
        self.logger.debug(f"Parsing DITA file: {path}")
        return etree.parse(str(path), self.parser).getroot()

    def parse_map(self, path: PathLike) -> etree._ElementTree:
        """Parse a map, keeping document level processing instructions."""
        self.logger.debug(f"Parsing DITA map: {path}")
        return etree.parse(str(path), self.parser)


def load_map(path: PathLike, parser: Optional[DITAParser] = None) -> etree._ElementTree:
    """Load a map document from disk."""
    return (parser or DITAParser()).parse_map(Path(path))
