# ditachunk/chunk/stub.py
"""Placeholder topics for chunk targets that have no backing file."""

import logging
from typing import Optional

from lxml import etree

from ..models.types import FileInfo, URIString
from ..utils.dita_class import (
    ATTR_FORMAT_VALUE_DITA,
    ATTRIBUTE_NAME_CLASS,
    ATTRIBUTE_NAME_COPY_TO,
    ATTRIBUTE_NAME_DITAARCHVERSION,
    ATTRIBUTE_NAME_DOMAINS,
    ATTRIBUTE_NAME_HREF,
    ATTRIBUTE_NAME_ID,
    ATTRIBUTE_NAME_NAVTITLE,
    DITA_NAMESPACE,
    FILE_EXTENSION_DITA,
    MAP_SHORTDESC,
    MAP_TOPICMETA,
    MAP_TOPICREF,
    MAPGROUP_D_TOPICGROUP,
    TOPIC_NAVTITLE,
    TOPIC_SHORTDESC,
    TOPIC_TITLE,
    TOPIC_TOPIC,
    DitaClass,
    get_element_node,
    get_text,
)
from ..utils.uri import (
    base_name,
    get_relative_path,
    resolve,
    to_file,
    to_uri,
)
from .filename import ChunkFilenameGenerator
from .job import Job
from .naming import TempFileNameScheme

FILE_NAME_STUB_DITAMAP = "stub.ditamap"
CHUNK_PREFIX = "Chunk"
ELEMENT_NAME_DITA = "dita"
DITA_ARCH_VERSION = "1.3"

PI_WORKDIR_TARGET = "workdir"
PI_WORKDIR_TARGET_URI = "workdir-uri"

NSMAP = {"ditaarch": DITA_NAMESPACE}


def get_child_element_value_of_topicmeta(element: etree._Element,
                                         cls: DitaClass) -> Optional[str]:
    """Text of a topicmeta child such as navtitle or shortdesc."""
    topicmeta = get_element_node(element, MAP_TOPICMETA)
    if topicmeta is None:
        return None
    elem = get_element_node(topicmeta, cls)
    if elem is None:
        return None
    return get_text(elem)


def build_chunk(id: str, title: Optional[str], shortdesc: Optional[str]) -> etree._ElementTree:
    """Stub topic document, or an empty ``dita`` wrapper if nothing is known."""
    if title is None and shortdesc is None:
        # topicgroup with no title and no shortdesc only needs an untitled stub
        root = etree.Element(ELEMENT_NAME_DITA, nsmap=NSMAP)
        root.set(ATTRIBUTE_NAME_DITAARCHVERSION, DITA_ARCH_VERSION)
        return etree.ElementTree(root)

    root = etree.Element(TOPIC_TOPIC.local_name, nsmap=NSMAP)
    root.set(ATTRIBUTE_NAME_DITAARCHVERSION, DITA_ARCH_VERSION)
    root.set(ATTRIBUTE_NAME_ID, id)
    root.set(ATTRIBUTE_NAME_CLASS, str(TOPIC_TOPIC))
    root.set(ATTRIBUTE_NAME_DOMAINS, "")
    title_elem = etree.SubElement(root, TOPIC_TITLE.local_name)
    title_elem.set(ATTRIBUTE_NAME_CLASS, str(TOPIC_TITLE))
    if title is not None:
        title_elem.text = title
    if shortdesc is not None:
        shortdesc_elem = etree.SubElement(root, TOPIC_SHORTDESC.local_name)
        shortdesc_elem.set(ATTRIBUTE_NAME_CLASS, str(TOPIC_SHORTDESC))
        shortdesc_elem.text = shortdesc
    return etree.ElementTree(root)


def build_topic_stump(new_file: URIString) -> etree._ElementTree:
    """Empty ``dita`` document carrying work directory instructions."""
    directory = resolve(new_file, ".")
    root = etree.Element(ELEMENT_NAME_DITA)
    root.addprevious(etree.ProcessingInstruction(PI_WORKDIR_TARGET, str(to_file(directory))))
    root.addprevious(etree.ProcessingInstruction(PI_WORKDIR_TARGET_URI, directory))
    return root.getroottree()


def write_document(document: etree._ElementTree, uri: URIString) -> None:
    """Serialize ``document`` to the file at ``uri``. Raises OSError."""
    path = to_file(uri)
    path.parent.mkdir(parents=True, exist_ok=True)
    document.write(str(path), xml_declaration=True, encoding="UTF-8")


class StubTopicGenerator:
    """
    Creates stub topics for to-content topicrefs without @href.

    The stub is registered in the job, the topicref's @href is pointed at it
    and topicgroups are reclassed as plain topicrefs.
    """

    def __init__(
        self,
        job: Job,
        current_file: URIString,
        temp_file_name_scheme: TempFileNameScheme,
        filename_generator: ChunkFilenameGenerator,
        writer=write_document
    ):
        self.logger = logging.getLogger(__name__)
        self.job = job
        self.current_file = current_file
        self.temp_file_name_scheme = temp_file_name_scheme
        self.filename_generator = filename_generator
        self.writer = writer

    def generate_filename(self) -> str:
        return self.filename_generator.generate_filename(CHUNK_PREFIX, FILE_EXTENSION_DITA)

    def get_result_file(self, topicref: etree._Element) -> URIString:
        """Output location for the stub, unique across the batch."""
        base = self.job.get_result(self.current_file)
        copy_to = to_uri(topicref.get(ATTRIBUTE_NAME_COPY_TO))
        id = topicref.get(ATTRIBUTE_NAME_ID)

        if copy_to is not None:
            return resolve(base, copy_to)
        if id is not None:
            return resolve(base, id + FILE_EXTENSION_DITA)
        results = self.job.results()
        while True:
            output = resolve(base, self.generate_filename())
            if output not in results:
                return output

    def generate(self, topicref: etree._Element) -> URIString:
        """Create the stub and return the new @href value."""
        result = self.get_result_file(topicref)
        temp = self.temp_file_name_scheme.generate_temp_file_name(result)
        abs_temp = self.job.absolute_temp(temp)

        name = base_name(result)
        navtitle = get_child_element_value_of_topicmeta(topicref, TOPIC_NAVTITLE)
        if navtitle is None:
            navtitle = topicref.get(ATTRIBUTE_NAME_NAVTITLE)
        shortdesc = get_child_element_value_of_topicmeta(topicref, MAP_SHORTDESC)

        try:
            self.writer(build_chunk(name, navtitle, shortdesc), abs_temp)
        except OSError as e:
            self.logger.error(f"Failed to write generated chunk {abs_temp}: {e}", exc_info=True)

        relative_path = get_relative_path(
            resolve(self.current_file, FILE_NAME_STUB_DITAMAP), abs_temp)
        topicref.set(ATTRIBUTE_NAME_HREF, relative_path)
        if MAPGROUP_D_TOPICGROUP.matches(topicref):
            topicref.set(ATTRIBUTE_NAME_CLASS, str(MAP_TOPICREF))

        self.job.add(FileInfo(uri=temp, result=result, format=ATTR_FORMAT_VALUE_DITA))
        self.logger.debug(f"Generated stub {abs_temp} for {result}")
        return relative_path
