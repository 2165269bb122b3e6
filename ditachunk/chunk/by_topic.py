# ditachunk/chunk/by_topic.py

from lxml import etree

from ..models.types import ChunkOperation, ChunkToken, URIString
from ..utils.dita_class import ATTRIBUTE_NAME_ID, TOPIC_TOPIC, iter_child_elements
from ..utils.uri import set_fragment


def walk_by_topic(topic: etree._Element, src: URIString) -> ChunkOperation:
    """
    Build a by-topic operation tree mirroring nested topics.

    Each operation's source is ``src`` with the topic id as fragment.
    """
    op = ChunkOperation(
        operation=ChunkToken.BY_TOPIC,
        src=set_fragment(src, topic.get(ATTRIBUTE_NAME_ID)),
    )
    for child_topic in iter_child_elements(topic, TOPIC_TOPIC):
        op.add_child(walk_by_topic(child_topic, src))
    return op
