# ditachunk/chunk/map_filter.py
"""Read and filter a DITA map for chunking."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Set

from lxml import etree

from ..config import ChunkConfig
from ..models.types import (
    ChunkDirective,
    ChunkOperation,
    ChunkTableError,
    ChunkToken,
    FileInfo,
    PathLike,
    ProcessingPhase,
    URIString,
)
from ..utils.dita_class import (
    ATTR_FORMAT_VALUE_DITAMAP,
    ATTR_PROCESSING_ROLE_VALUE_RESOURCE_ONLY,
    ATTR_SCOPE_VALUE_EXTERNAL,
    ATTRIBUTE_NAME_CHUNK,
    ATTRIBUTE_NAME_CLASS,
    ATTRIBUTE_NAME_COPY_TO,
    ATTRIBUTE_NAME_HREF,
    ATTRIBUTE_NAME_MAPREF,
    ATTRIBUTE_NAME_PROCESSING_ROLE,
    ATTRIBUTE_NAME_SCOPE,
    ATTRIBUTE_NAME_XTRF,
    FILE_EXTENSION_DITA,
    FILE_EXTENSION_DITAMAP,
    MAP_NAVREF,
    MAP_RELTABLE,
    MAP_TOPICREF,
    get_cascade_value,
    get_child_elements,
    split_tokens,
)
from ..utils.dita_parser import DITAParser, load_map
from ..utils.logger import DITALogger, log_processing_phase
from ..utils.uri import (
    base_name,
    file_name,
    get_fragment,
    get_relative_path,
    is_absolute,
    path_to_uri,
    replace_extension,
    resolve,
    set_fragment,
    strip_fragment,
    to_file,
    to_uri,
)
from . import directives
from .by_topic import walk_by_topic
from .document import (
    build_output_document,
    clone_element,
    read_processing_instructions,
    write_map,
)
from .filename import new_filename_generator
from .job import PROPERTY_TEMP_FILE_NAME_SCHEME, Job
from .link_scanner import read_links
from .naming import get_naming_scheme
from .stub import (
    CHUNK_PREFIX,
    FILE_NAME_STUB_DITAMAP,
    StubTopicGenerator,
    build_topic_stump,
    write_document,
)

ATTR_XTRF_VALUE_GENERATED = "generated_by_chunk"
NAVIGATION_MAP_PREFIX = "MAPCHUNK"

MSG_TO_CONTENT_BY_TOPIC = (
    'Chunk attribute uses both "to-content" and "by-topic" that conflict '
    'with each other. Ignoring "by-topic" token.'
)


@dataclass(frozen=True)
class Cascade:
    """Values a topicref inherits from its ancestors."""
    by_mode: str
    scope: Optional[str] = None
    processing_role: Optional[str] = None

    def descend(self, topicref: etree._Element, directive: ChunkDirective) -> "Cascade":
        return Cascade(
            by_mode=directive.by_mode,
            scope=topicref.get(ATTRIBUTE_NAME_SCOPE, self.scope),
            processing_role=topicref.get(ATTRIBUTE_NAME_PROCESSING_ROLE, self.processing_role),
        )


class ChunkMapFilter:
    """
    Compute chunk operations for a map and rewrite the map in place.

    One instance handles one map at a time. After :meth:`process` the
    operation list, change table, conflict table and chunk topic set
    describe the run.
    """

    def __init__(
        self,
        job: Job,
        config: Optional[ChunkConfig] = None,
        exists: Optional[Callable[[URIString], bool]] = None,
        parse_file: Optional[Callable[[PathLike], etree._Element]] = None,
        write_map: Callable[[etree._ElementTree, URIString], None] = write_map,
        write_document: Callable[[etree._ElementTree, URIString], None] = write_document,
        logger: Optional[DITALogger] = None
    ):
        self.logger = logger or DITALogger(__name__)
        self.job = job
        self.config = config or ChunkConfig()
        if self.config.log_file is not None:
            self.logger.setup(log_file=self.config.log_file)

        scheme_name = job.get_property(PROPERTY_TEMP_FILE_NAME_SCHEME) or self.config.temp_file_name_scheme
        # Fails before any traversal when the scheme is unknown
        self.temp_file_name_scheme = get_naming_scheme(scheme_name, job.input_dir_uri)

        self.root_chunk_override: Optional[tuple] = None
        if self.config.root_chunk_override is not None:
            self.set_root_chunk_override(self.config.root_chunk_override)
        self.support_to_navigation = self.config.support_to_navigation
        self.filename_generator = new_filename_generator(self.config.filename_generator)

        self._exists_oracle = exists or (lambda uri: to_file(uri).exists())
        self._parse_file = parse_file or DITAParser().parse_file
        self._write_map = write_map
        self._write_document = write_document

        self.current_file: Optional[URIString] = None
        self._reset()

    def _reset(self) -> None:
        # keys and values are absolute URIs, optionally with fragments
        self.change_table: Dict[URIString, URIString] = {}
        self.conflict_table: Dict[URIString, URIString] = {}
        self.changes: List[ChunkOperation] = []
        self.chunk_topic_set: Set[URIString] = set()
        self.default_chunk_by_token = ChunkToken.BY_DOCUMENT.token
        self._generated: Set[URIString] = set()
        self._instructions: Dict[str, etree._ProcessingInstruction] = {}
        self._root: Optional[etree._Element] = None
        self._stub_generator: Optional[StubTopicGenerator] = None

    @property
    def current_map_id(self) -> Optional[str]:
        return base_name(self.current_file) if self.current_file else None

    def set_root_chunk_override(self, chunk_value: Optional[str]) -> None:
        tokens = split_tokens(chunk_value)
        self.root_chunk_override = tokens if chunk_value is not None else None

    def set_support_to_navigation(self, support_to_navigation: bool) -> None:
        self.support_to_navigation = support_to_navigation

    ### ENTRY POINTS ###

    def read(self, input_file: PathLike) -> etree._ElementTree:
        """Parse ``input_file`` and return the processed map document."""
        document = load_map(input_file)
        return self.process(document, path_to_uri(input_file))

    def process(self, document: etree._ElementTree,
                current_file: Optional[URIString] = None) -> etree._ElementTree:
        """
        Process a parsed map.

        ``current_file`` is the absolute URI of the map; it defaults to the
        location the document was parsed from.
        """
        if current_file is None and document.docinfo.URL:
            url = document.docinfo.URL
            current_file = url if is_absolute(url) else path_to_uri(url)
        if not is_absolute(current_file):
            raise ValueError(f"Map location must be an absolute URI: {current_file}")
        self.current_file = current_file
        return self._process(document)

    @log_processing_phase(ProcessingPhase.TRANSFORMATION)
    def _process(self, document: etree._ElementTree) -> etree._ElementTree:
        self._reset()
        root = document.getroot()
        self._root = root
        self._stub_generator = StubTopicGenerator(
            job=self.job,
            current_file=self.current_file,
            temp_file_name_scheme=self.temp_file_name_scheme,
            filename_generator=self.filename_generator,
            writer=self._write_document,
        )

        if self.root_chunk_override is not None:
            chunk = " ".join(self.root_chunk_override)
            self.logger.debug(f'Use override root chunk "{chunk}"')
            root.set(ATTRIBUTE_NAME_CHUNK, chunk)

        self.chunk_topic_set = read_links(root, self.current_file)
        self._instructions = read_processing_instructions(document)

        root_chunk = split_tokens(root.get(ATTRIBUTE_NAME_CHUNK))
        self.default_chunk_by_token = directives.default_by_token(root_chunk)

        if ChunkToken.TO_CONTENT.token in root_chunk:
            self._chunk_map(root)
        else:
            cascade = Cascade(
                by_mode=self.default_chunk_by_token,
                scope=root.get(ATTRIBUTE_NAME_SCOPE),
                processing_role=root.get(ATTRIBUTE_NAME_PROCESSING_ROLE),
            )
            reltables = []
            for child in get_child_elements(root):
                if MAP_RELTABLE.matches(child):
                    reltables.append(child)
                elif MAP_TOPICREF.matches(child):
                    self._process_topicref(child, cascade)
            for reltable in reltables:
                self._update_reltable(reltable)

        self.logger.info(
            f"Chunked {self.current_file}: {len(self.changes)} operations, "
            f"{len(self.change_table)} changes, {len(self.conflict_table)} conflicts"
        )
        return build_output_document(root, self._instructions)

    ### RESULTS ###

    def get_chunks(self) -> List[ChunkOperation]:
        return list(self.changes)

    def get_chunk_topic_set(self) -> FrozenSet[URIString]:
        """Absolute topic URIs under active chunking."""
        return frozenset(self.chunk_topic_set)

    def get_change_table(self) -> Mapping[URIString, URIString]:
        """Changed files, absolute URIs."""
        self._check_absolute("change table", self.change_table)
        return MappingProxyType(dict(self.change_table))

    def get_conflict_table(self) -> Mapping[URIString, URIString]:
        """New file to the file it would have overwritten, absolute URIs."""
        self._check_absolute("conflict table", self.conflict_table)
        return MappingProxyType(dict(self.conflict_table))

    @staticmethod
    def _check_absolute(name: str, table: Dict[URIString, URIString]) -> None:
        for key, value in table.items():
            if not (is_absolute(key) and is_absolute(value)):
                raise ChunkTableError(name, key, value)

    ### TRAVERSAL ###

    def _exists(self, uri: URIString) -> bool:
        uri = strip_fragment(uri)
        return uri in self._generated or self._exists_oracle(uri)

    def _is_claimed(self, uri: URIString) -> bool:
        """Whether ``uri`` exists or is already an output of this run or batch."""
        return (
            self._exists(uri)
            or uri in self.change_table
            or uri in self.job.results()
        )

    def _chunk_map(self, root: etree._Element) -> None:
        """
        Process a map whose root is chunked to-content.

        The root is temporarily reclassed as a topicref pointing at a new
        stump topic named after the map.
        """
        new_filename = replace_extension(file_name(self.current_file), FILE_EXTENSION_DITA)
        new_file = resolve(self.current_file, new_filename)
        if self._exists(new_file):
            old_file = new_file
            while self._is_claimed(new_file):
                new_filename = self.filename_generator.generate_filename(CHUNK_PREFIX, FILE_EXTENSION_DITA)
                new_file = resolve(self.current_file, new_filename)
            # references to the old name may need updating
            self.conflict_table[new_file] = old_file
            self.logger.debug(f"{old_file} exists, using {new_file}")
        self.change_table[new_file] = new_file

        orig_cls = root.get(ATTRIBUTE_NAME_CLASS)
        root.set(ATTRIBUTE_NAME_CLASS, (orig_cls or "") + MAP_TOPICREF.matcher)
        root.set(ATTRIBUTE_NAME_HREF, to_uri(new_filename))

        self._create_topic_stump(new_file)

        self._process_topicref(root, Cascade(by_mode=self.default_chunk_by_token))

        if orig_cls is not None:
            root.set(ATTRIBUTE_NAME_CLASS, orig_cls)
        else:
            root.attrib.pop(ATTRIBUTE_NAME_CLASS, None)
        root.attrib.pop(ATTRIBUTE_NAME_HREF, None)

    def _create_topic_stump(self, new_file: URIString) -> None:
        try:
            self._write_document(build_topic_stump(new_file), new_file)
            self._generated.add(new_file)
        except OSError as e:
            self.logger.error(f"Failed to write topic stump {new_file}: {e}", exc_info=True)

    def _process_topicref(self, topicref: etree._Element, inherited: Cascade) -> None:
        xtrf = topicref.get(ATTRIBUTE_NAME_XTRF)
        if xtrf is not None and ATTR_XTRF_VALUE_GENERATED in xtrf:
            return

        directive = directives.resolve(topicref.get(ATTRIBUTE_NAME_CHUNK), inherited.by_mode)
        cascade = inherited.descend(topicref, directive)

        href = to_uri(topicref.get(ATTRIBUTE_NAME_HREF))
        copy_to = to_uri(topicref.get(ATTRIBUTE_NAME_COPY_TO))

        if (cascade.scope == ATTR_SCOPE_VALUE_EXTERNAL
                or (href is not None and not self._exists(resolve(self.current_file, href)))
                or (directive.is_empty and href is None)):
            self._process_child_topicrefs(topicref, cascade)
        elif directive.has(ChunkToken.TO_CONTENT):
            self._process_to_content(topicref, directive, href, copy_to)
            self._process_child_topicrefs(topicref, cascade)
        elif directive.has(ChunkToken.TO_NAVIGATION) and self.support_to_navigation:
            self._process_child_topicrefs(topicref, cascade)
            self._process_navigation(topicref)
        elif directive.by_mode == ChunkToken.BY_TOPIC.token:
            if href is not None:
                self._read_by_topic(href, directive.select_mode)
            else:
                self.logger.warning(
                    f"{ChunkToken.BY_TOPIC.token} set on topicref without href "
                    f"(id: {topicref.get('id', 'N/A')})"
                )
            self._process_child_topicrefs(topicref, cascade)
        else:
            self._process_by_document(href, copy_to, cascade)
            self._process_child_topicrefs(topicref, cascade)

    def _process_child_topicrefs(self, topicref: etree._Element, cascade: Cascade) -> None:
        for child in get_child_elements(topicref, MAP_TOPICREF):
            self._process_topicref(child, cascade)

    def _process_to_content(self, topicref: etree._Element, directive: ChunkDirective,
                            href: Optional[URIString], copy_to: Optional[URIString]) -> None:
        if directive.has(ChunkToken.BY_TOPIC):
            self.logger.warning(f"{MSG_TO_CONTENT_BY_TOPIC} (id: {topicref.get('id', 'N/A')})")

        if copy_to is not None:
            dst = copy_to
        elif href is not None:
            dst = href
        else:
            dst = self._stub_generator.generate(topicref)

        op = ChunkOperation(
            operation=ChunkToken.TO_CONTENT,
            select=directive.select_mode,
            src=resolve(self.current_file, href) if href is not None else None,
            dst=resolve(self.current_file, dst),
        )
        self._collect_combine_chunk(get_child_elements(topicref, MAP_TOPICREF), op)
        self.changes.append(op)

    def _collect_combine_chunk(self, topicrefs: List[etree._Element],
                               parent: ChunkOperation) -> None:
        """Add non to-content descendants as passthrough children of ``parent``."""
        for topicref in topicrefs:
            tokens = split_tokens(topicref.get(ATTRIBUTE_NAME_CHUNK))
            if ChunkToken.TO_CONTENT.token in tokens:
                continue
            href = to_uri(topicref.get(ATTRIBUTE_NAME_HREF))
            op = ChunkOperation(
                operation=None,
                select=directives.get_select(tokens),
                src=resolve(self.current_file, href) if href is not None else None,
            )
            parent.add_child(op)
            self._collect_combine_chunk(get_child_elements(topicref, MAP_TOPICREF), op)

    def _read_by_topic(self, href: URIString, select: Optional[ChunkToken]) -> None:
        """Read the topic file and add a by-topic operation for its topics."""
        src = resolve(self.current_file, href)
        try:
            document_element = self._parse_file(to_file(src))
        except Exception as e:
            self.logger.error(f"Failed to read {href}: {e}", exc_info=True)
            return
        op = walk_by_topic(document_element, src)
        op.select = select
        self.changes.append(op)

    def _process_by_document(self, href: Optional[URIString], copy_to: Optional[URIString],
                             cascade: Cascade) -> None:
        current_path = None
        if copy_to is not None:
            current_path = resolve(self.current_file, copy_to)
        elif href is not None:
            current_path = resolve(self.current_file, href)
        if current_path is None:
            return
        # re-insert so the latest write is also last in order
        self.change_table.pop(current_path, None)
        if cascade.processing_role != ATTR_PROCESSING_ROLE_VALUE_RESOURCE_ONLY:
            self.change_table[current_path] = current_path

    def _process_navigation(self, topicref: etree._Element) -> None:
        """Move ``topicref`` into a new map and refer to it with a navref."""
        root = clone_element(self._root)
        result_base = self.job.get_result(self.current_file)
        results = self.job.results()
        while True:
            new_map_file = self.filename_generator.generate_filename(
                NAVIGATION_MAP_PREFIX, FILE_EXTENSION_DITAMAP)
            navmap = resolve(self.current_file, new_map_file)
            result = resolve(result_base, new_map_file)
            if not (self._is_claimed(navmap) or result in results):
                break

        navref = etree.Element(MAP_NAVREF.local_name)
        navref.set(ATTRIBUTE_NAME_MAPREF, new_map_file)
        navref.set(ATTRIBUTE_NAME_CLASS, str(MAP_NAVREF))
        navref.tail = topicref.tail
        topicref.getparent().replace(topicref, navref)
        topicref.tail = None
        root.append(topicref)

        self.change_table[navmap] = navmap
        self._generated.add(navmap)
        self.job.add(FileInfo(uri=navmap, result=result, format=ATTR_FORMAT_VALUE_DITAMAP))
        self._write_map(build_output_document(root, self._instructions), navmap)

    def _update_reltable(self, reltable: etree._Element) -> None:
        """Point relationship table links at the final location of chunked topics."""
        stub = resolve(self.current_file, FILE_NAME_STUB_DITAMAP)
        for elem in reltable.iter(etree.Element):
            href = elem.get(ATTRIBUTE_NAME_HREF)
            if not href or get_cascade_value(elem, ATTRIBUTE_NAME_SCOPE) == ATTR_SCOPE_VALUE_EXTERNAL:
                continue
            target = strip_fragment(resolve(self.current_file, to_uri(href)))
            if target not in self.change_table:
                continue
            new_href = get_relative_path(stub, strip_fragment(self.change_table[target]))
            new_href = set_fragment(new_href, get_fragment(href))
            if new_href != href:
                self.logger.debug(f"Update reltable link {href} -> {new_href}")
                elem.set(ATTRIBUTE_NAME_HREF, new_href)
