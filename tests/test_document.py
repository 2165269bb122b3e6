from lxml import etree

from conftest import topic_xml
from ditachunk.chunk.by_topic import walk_by_topic
from ditachunk.chunk.document import (
    build_output_document,
    clone_element,
    read_processing_instructions,
    write_map,
)
from ditachunk.models.types import ChunkToken
from ditachunk.utils.dita_parser import load_map
from ditachunk.utils.uri import path_to_uri

MAP = (
    '<?workdir /work?><?path2rootmap-uri ../map.ditamap?><?workdir-uri file:/work/?>'
    '<map class="- map/map " title="T"><topicref class="- map/topicref " href="a.dita"/></map>'
)


def parse(content):
    return etree.fromstring(content.encode("utf-8")).getroottree()


def test_read_processing_instructions():
    instructions = read_processing_instructions(parse(MAP))

    assert set(instructions) == {"workdir", "workdir-uri", "path2rootmap-uri"}
    assert instructions["workdir"].text == "/work"


def test_output_document_orders_instructions():
    document = parse(MAP)
    output = build_output_document(document.getroot(), read_processing_instructions(document))

    targets = []
    node = output.getroot().getprevious()
    while node is not None:
        targets.insert(0, node.target)
        node = node.getprevious()
    assert targets == ["workdir", "workdir-uri", "path2rootmap-uri"]
    assert output.getroot().get("title") == "T"
    assert output.getroot()[0].get("href") == "a.dita"


def test_clone_element_is_shallow_by_default():
    root = parse(MAP).getroot()

    clone = clone_element(root)

    assert clone.tag == "map"
    assert clone.get("class") == "- map/map "
    assert len(clone) == 0
    assert len(root) == 1


def test_write_map_logs_failures(tmp_path, caplog):
    blocker = tmp_path / "file"
    blocker.write_text("x")

    write_map(parse(MAP), path_to_uri(blocker) + "/nested/out.ditamap")

    assert any("Failed to write map" in r.getMessage() for r in caplog.records)


def test_write_map(tmp_path):
    target = tmp_path / "out.ditamap"

    write_map(parse(MAP), path_to_uri(target))

    assert etree.parse(str(target)).getroot().tag == "map"


def test_walk_by_topic_on_dita_wrapper():
    wrapper = etree.fromstring(
        '<dita>' + topic_xml("one", topic_xml("one-a")) + topic_xml("two") + '</dita>'
    )

    op = walk_by_topic(wrapper, "file:///work/t.dita")

    assert op.operation == ChunkToken.BY_TOPIC
    assert op.src == "file:///work/t.dita"
    assert [child.src for child in op.children] == [
        "file:///work/t.dita#one",
        "file:///work/t.dita#two",
    ]
    assert op.children[0].children[0].src == "file:///work/t.dita#one-a"
    assert op.to_dict()["children"][1] == {
        "operation": "by-topic",
        "select": None,
        "src": "file:///work/t.dita#two",
        "dst": None,
        "children": [],
    }


def test_load_map_keeps_processing_instructions(tmp_path):
    target = tmp_path / "in.ditamap"
    target.write_text(MAP)

    document = load_map(target)

    assert set(read_processing_instructions(document)) == {"workdir", "workdir-uri", "path2rootmap-uri"}
