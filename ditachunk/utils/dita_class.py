# ditachunk/utils/dita_class.py

from dataclasses import dataclass
from typing import Iterator, List, Optional, Union

from lxml import etree

ATTRIBUTE_NAME_CLASS = "class"
ATTRIBUTE_NAME_HREF = "href"
ATTRIBUTE_NAME_COPY_TO = "copy-to"
ATTRIBUTE_NAME_CHUNK = "chunk"
ATTRIBUTE_NAME_SCOPE = "scope"
ATTRIBUTE_NAME_PROCESSING_ROLE = "processing-role"
ATTRIBUTE_NAME_ID = "id"
ATTRIBUTE_NAME_NAVTITLE = "navtitle"
ATTRIBUTE_NAME_XTRF = "xtrf"
ATTRIBUTE_NAME_MAPREF = "mapref"
ATTRIBUTE_NAME_DOMAINS = "domains"

ATTR_SCOPE_VALUE_EXTERNAL = "external"
ATTR_PROCESSING_ROLE_VALUE_RESOURCE_ONLY = "resource-only"
ATTR_FORMAT_VALUE_DITA = "dita"
ATTR_FORMAT_VALUE_DITAMAP = "ditamap"

DITA_NAMESPACE = "http://dita.oasis-open.org/architecture/2005/"
ATTRIBUTE_NAME_DITAARCHVERSION = f"{{{DITA_NAMESPACE}}}DITAArchVersion"

FILE_EXTENSION_DITA = ".dita"
FILE_EXTENSION_DITAMAP = ".ditamap"


# @class defaults the map DTDs supply when the attribute is omitted
DEFAULT_CLASSES = {
    "map": "- map/map ",
    "topicref": "- map/topicref ",
    "reltable": "- map/reltable ",
    "navref": "- map/navref ",
    "topicmeta": "- map/topicmeta ",
    "anchor": "- map/anchor ",
    "topicgroup": "+ map/topicref mapgroup-d/topicgroup ",
    "topichead": "+ map/topicref mapgroup-d/topichead ",
    "mapref": "+ map/topicref mapgroup-d/mapref ",
    "keydef": "+ map/topicref mapgroup-d/keydef ",
    "anchorref": "+ map/topicref mapgroup-d/anchorref ",
    "topicset": "+ map/topicref mapgroup-d/topicset ",
    "topicsetref": "+ map/topicref mapgroup-d/topicsetref ",
}


@dataclass(frozen=True)
class DitaClass:
    """A DITA @class value such as ``- map/topicref ``."""
    value: str

    @property
    def matcher(self) -> str:
        """Most specific type token, padded with spaces."""
        return f" {self.value.split()[-1]} "

    @property
    def local_name(self) -> str:
        return self.value.split()[-1].split("/")[-1]

    def matches(self, target: Union[str, etree._Element, None]) -> bool:
        """
        Check an element or class string against this class.

        Elements without a @class attribute use the default class for their
        tag, or failing that are matched by tag name.
        """
        if target is None:
            return False
        if isinstance(target, str):
            return self.matcher in f"{target} "
        if not isinstance(target.tag, str):
            return False
        localname = etree.QName(target).localname
        cls = target.get(ATTRIBUTE_NAME_CLASS, DEFAULT_CLASSES.get(localname))
        if cls is None:
            return localname == self.local_name
        return self.matcher in f"{cls} "

    def __str__(self) -> str:
        return self.value


MAP_TOPICREF = DitaClass("- map/topicref ")
MAP_RELTABLE = DitaClass("- map/reltable ")
MAP_NAVREF = DitaClass("- map/navref ")
MAP_TOPICMETA = DitaClass("- map/topicmeta ")
MAP_SHORTDESC = DitaClass("- topic/shortdesc map/shortdesc ")
MAPGROUP_D_TOPICGROUP = DitaClass("+ map/topicref mapgroup-d/topicgroup ")
SUBMAP = DitaClass("+ map/topicref mapgroup-d/topicgroup ditaot-d/submap ")
TOPIC_TOPIC = DitaClass("- topic/topic ")
TOPIC_TITLE = DitaClass("- topic/title ")
TOPIC_SHORTDESC = DitaClass("- topic/shortdesc ")
TOPIC_NAVTITLE = DitaClass("- topic/navtitle ")


def split_tokens(value: Optional[str]) -> tuple:
    """Split a whitespace separated attribute value, dropping duplicates."""
    if not value:
        return ()
    return tuple(dict.fromkeys(value.split()))


def get_cascade_value(elem: etree._Element, attr: str) -> Optional[str]:
    """Attribute value from ``elem`` or its nearest ancestor that sets it."""
    current = elem
    while current is not None:
        value = current.get(attr)
        if value is not None:
            return value
        current = current.getparent()
    return None


def iter_child_elements(elem: etree._Element,
                        cls: Optional[DitaClass] = None) -> Iterator[etree._Element]:
    for child in elem:
        if not isinstance(child.tag, str):
            continue
        if cls is None or cls.matches(child):
            yield child


def get_child_elements(elem: etree._Element,
                       cls: Optional[DitaClass] = None) -> List[etree._Element]:
    """Direct element children, optionally filtered by class."""
    return list(iter_child_elements(elem, cls))


def get_element_node(elem: etree._Element, cls: DitaClass) -> Optional[etree._Element]:
    """First direct child matching ``cls``."""
    return next(iter_child_elements(elem, cls), None)


def get_text(elem: etree._Element) -> str:
    return "".join(elem.itertext())
