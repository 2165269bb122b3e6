# ditachunk/chunk/document.py
"""Processing instruction capture and output map assembly."""

import copy
import logging
from typing import Dict, Optional

from lxml import etree

from ..models.types import URIString
from .stub import PI_WORKDIR_TARGET, PI_WORKDIR_TARGET_URI, write_document

PI_PATH2PROJ_TARGET = "path2project"
PI_PATH2PROJ_TARGET_URI = "path2project-uri"
PI_PATH2ROOTMAP_TARGET_URI = "path2rootmap-uri"

# Output order of the leading instructions
PROCESSING_INSTRUCTIONS = (
    PI_WORKDIR_TARGET,
    PI_WORKDIR_TARGET_URI,
    PI_PATH2PROJ_TARGET,
    PI_PATH2PROJ_TARGET_URI,
    PI_PATH2ROOTMAP_TARGET_URI,
)

logger = logging.getLogger(__name__)


def read_processing_instructions(document: etree._ElementTree) -> Dict[str, etree._ProcessingInstruction]:
    """Document level processing instructions that carry job metadata."""
    found: Dict[str, etree._ProcessingInstruction] = {}
    root = document.getroot()
    node = root.getprevious()
    siblings = []
    while node is not None:
        siblings.append(node)
        node = node.getprevious()
    for node in reversed(siblings):
        if isinstance(node, etree._ProcessingInstruction) and node.target in PROCESSING_INSTRUCTIONS:
            found[node.target] = node
    return found


def clone_element(elem: etree._Element, deep: bool = False) -> etree._Element:
    """Copy of ``elem`` as the root of a new document, without tail text."""
    clone = etree.Element(elem.tag, attrib=dict(elem.attrib), nsmap=elem.nsmap)
    if deep:
        clone.text = elem.text
        for child in elem:
            clone.append(copy.deepcopy(child))
    return clone


def build_output_document(
    root: etree._Element,
    instructions: Optional[Dict[str, etree._ProcessingInstruction]] = None
) -> etree._ElementTree:
    """Copy ``root`` into a new document preceded by the captured instructions."""
    new_root = clone_element(root, deep=True)
    for target in PROCESSING_INSTRUCTIONS:
        pi = (instructions or {}).get(target)
        if pi is not None:
            new_root.addprevious(etree.ProcessingInstruction(pi.target, pi.text))
    return new_root.getroottree()


def write_map(document: etree._ElementTree, uri: URIString) -> None:
    """Write a map document. Failures are logged and do not propagate."""
    try:
        write_document(document, uri)
        logger.debug(f"Wrote map {uri}")
    except OSError as e:
        logger.error(f"Failed to write map {uri}: {e}", exc_info=True)
