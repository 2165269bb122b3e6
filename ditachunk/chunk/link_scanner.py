# ditachunk/chunk/link_scanner.py

import logging
from typing import Set

from lxml import etree

from ..models.types import ChunkToken, URIString
from ..utils.dita_class import (
    ATTRIBUTE_NAME_CHUNK,
    ATTRIBUTE_NAME_COPY_TO,
    ATTRIBUTE_NAME_HREF,
    MAP_RELTABLE,
    MAP_TOPICREF,
    MAPGROUP_D_TOPICGROUP,
    SUBMAP,
    iter_child_elements,
)
from ..utils.uri import resolve, strip_fragment, to_uri


class LinkScanner:
    """Collect topics that fall under an active, non-disabled chunk scope."""

    def __init__(self, current_file: URIString):
        self.logger = logging.getLogger(__name__)
        self.current_file = current_file
        self.chunk_topic_set: Set[URIString] = set()

    def scan(self, root: etree._Element) -> Set[URIString]:
        self._read_links(root, chunk=False, disabled=False)
        self.logger.debug(f"{len(self.chunk_topic_set)} topics in chunk scope")
        return self.chunk_topic_set

    def _is_disabled(self, elem: etree._Element) -> bool:
        return (
            ChunkToken.TO_NAVIGATION.token in (elem.get(ATTRIBUTE_NAME_CHUNK) or "")
            or (MAPGROUP_D_TOPICGROUP.matches(elem) and not SUBMAP.matches(elem))
            or MAP_RELTABLE.matches(elem)
        )

    def _read_links(self, elem: etree._Element, chunk: bool, disabled: bool) -> None:
        c = chunk or elem.get(ATTRIBUTE_NAME_CHUNK) is not None
        d = disabled or self._is_disabled(elem)

        href = to_uri(elem.get(ATTRIBUTE_NAME_HREF))
        if href is not None and c and not d:
            self.chunk_topic_set.add(strip_fragment(resolve(self.current_file, href)))
            copy_to = to_uri(elem.get(ATTRIBUTE_NAME_COPY_TO))
            if copy_to is not None:
                self.chunk_topic_set.add(strip_fragment(resolve(self.current_file, copy_to)))

        for topicref in iter_child_elements(elem, MAP_TOPICREF):
            self._read_links(topicref, c, d)


def read_links(root: etree._Element, current_file: URIString) -> Set[URIString]:
    """Set of absolute topic URIs reachable under active chunking."""
    return LinkScanner(current_file).scan(root)
