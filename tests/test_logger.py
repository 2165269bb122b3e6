import logging

import pytest

from ditachunk.models.types import NamingSchemeError, ProcessingPhase
from ditachunk.utils.logger import DITALogger, log_processing_phase


class Phased:
    current_map_id = "guide"

    def __init__(self):
        self.logger = DITALogger("ditachunk.tests")

    @log_processing_phase(ProcessingPhase.TRANSFORMATION)
    def run(self, fail=None):
        if fail is not None:
            raise fail
        return "done"


def test_phase_start_and_end_are_logged(caplog):
    with caplog.at_level(logging.INFO, logger="ditachunk"):
        assert Phased().run() == "done"

    messages = [r.getMessage() for r in caplog.records]
    assert "Starting transformation phase - Map: guide" in messages
    assert "Completed transformation phase - Map: guide" in messages


def test_processing_error_is_logged_and_reraised(caplog):
    with pytest.raises(NamingSchemeError):
        Phased().run(NamingSchemeError("bogus"))

    assert any("Unknown temp file name scheme: bogus" in r.getMessage() for r in caplog.records)


def test_other_errors_get_detailed_log(caplog):
    with pytest.raises(KeyError):
        Phased().run(KeyError("missing"))

    assert any("Error Type: KeyError" in r.getMessage() for r in caplog.records)


def test_setup_is_idempotent(tmp_path):
    base = logging.getLogger("ditachunk")
    before = list(base.handlers)
    level = base.level
    configured = base.__dict__.pop("_dita_configured", None)
    try:
        DITALogger().setup(log_file=tmp_path / "chunk.log")
        count = len(base.handlers)
        DITALogger().setup(log_file=tmp_path / "chunk.log")
        assert len(base.handlers) == count == len(before) + 2
    finally:
        for handler in base.handlers[len(before):]:
            base.removeHandler(handler)
            handler.close()
        base.setLevel(level)
        base.__dict__.pop("_dita_configured", None)
        if configured is not None:
            base._dita_configured = configured
