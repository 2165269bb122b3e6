import sys
from pathlib import Path

import pytest

# Add the project root directory to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ditachunk.chunk.job import Job
from ditachunk.models.types import FileInfo
from ditachunk.utils.uri import path_to_uri

MAP_CLASS = "- map/map "
TOPICREF_CLASS = "- map/topicref "


def topic_xml(id, children="", title=None):
    """Minimal topic with optional nested topic markup."""
    return (
        f'<topic id="{id}" class="- topic/topic ">'
        f'<title class="- topic/title ">{title or id}</title>'
        f'{children}</topic>'
    )


def map_xml(body, root_attrs="", prolog=""):
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'{prolog}<map class="{MAP_CLASS}" {root_attrs}>{body}</map>'
    )


def topicref(attrs="", children=""):
    return f'<topicref class="{TOPICREF_CLASS}" {attrs}>{children}</topicref>'


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory holding the map and its topics."""
    path = tmp_path / "temp"
    path.mkdir()
    return path


@pytest.fixture
def input_dir(tmp_path):
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def job(temp_dir, input_dir):
    job = Job(temp_dir=temp_dir, input_dir=input_dir)
    job.add(FileInfo(
        uri="map.ditamap",
        result=path_to_uri(input_dir / "map.ditamap"),
        format="ditamap"
    ))
    return job


@pytest.fixture
def write_topic(temp_dir):
    """Write a topic file into the temporary directory."""
    def _write(name, content=None):
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content if content is not None else topic_xml(Path(name).stem),
                        encoding="utf-8")
        return path
    return _write


@pytest.fixture
def write_map(temp_dir):
    """Write map.ditamap into the temporary directory."""
    def _write(body, root_attrs="", prolog=""):
        path = temp_dir / "map.ditamap"
        path.write_text(map_xml(body, root_attrs, prolog), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def uri(temp_dir):
    """Absolute URI of a file in the temporary directory."""
    def _uri(name):
        return path_to_uri(temp_dir) + name
    return _uri
