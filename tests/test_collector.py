import dataclasses
import io
import json
import logging

import pytest

from metascan.core import taxonomy
from metascan.core.collector import ErrorCollector
from metascan.core.logs import StructuredLogSink
from metascan.core.models import Finding, Severity


class BrokenStream(io.StringIO):
    def write(self, s):
        raise OSError("disk full")


def make_collector(stream=None, enabled=True):
    return ErrorCollector(sink=StructuredLogSink(stream or io.StringIO(), enabled=enabled))


def test_errors_and_warnings_are_separate_buckets():
    collector = make_collector()
    collector.add_warning("a.md", type=taxonomy.INVALID_FILE_PATH, message="misplaced")
    assert not collector.any()
    assert collector.count() == 0

    finding = collector.add_error("a.md", line=3, field="id", type=taxonomy.INVALID_ID_FORMAT, message="bad id")
    assert collector.any()
    assert collector.count() == 1
    assert finding.severity is Severity.ERROR
    assert collector.warnings[0].severity is Severity.WARNING


def test_insertion_order_is_kept_and_duplicates_are_not_merged():
    collector = make_collector()
    collector.add_error("b.md", type="t", message="one")
    collector.add_error("a.md", type="t", message="two")
    collector.add_error("b.md", type="t", message="one")
    assert [(f.file, f.message) for f in collector.errors] == [("b.md", "one"), ("a.md", "two"), ("b.md", "one")]
    assert collector.files_with_errors() == ["b.md", "a.md"]


def test_findings_are_immutable_and_views_are_copies():
    collector = make_collector()
    finding = collector.add_error("a.md", type="t", message="m")
    with pytest.raises(dataclasses.FrozenInstanceError):
        finding.message = "changed"
    assert isinstance(collector.errors, tuple)
    collector.clear()
    assert collector.errors == ()


def test_custom_taxonomy_tags_are_accepted():
    collector = make_collector()
    collector.add_error("a.md", type="my_new_rule", message="m")
    assert collector.errors[0].type == "my_new_rule"


def test_secret_is_hidden_from_repr_and_dict():
    collector = make_collector()
    finding = collector.add_error("a.md", field="token", type=taxonomy.POTENTIAL_SECRET, message="m", secret="ghp_abc")
    assert "ghp_abc" not in repr(finding)
    assert "ghp_abc" not in json.dumps(finding.to_dict())


def test_summary_counts():
    collector = make_collector()
    collector.add_error("a.md", type=taxonomy.INVALID_ID_FORMAT, message="m")
    collector.add_error("b.md", type=taxonomy.INVALID_ID_FORMAT, message="m")
    collector.add_warning("b.md", type=taxonomy.INVALID_FILE_PATH, message="w")
    summary = collector.summary()
    assert summary["counts"] == {"errors": 2, "warnings": 1}
    assert summary["by_type"] == {taxonomy.INVALID_FILE_PATH: 1, taxonomy.INVALID_ID_FORMAT: 2}
    assert summary["by_file"]["b.md"] == {"errors": 1, "warnings": 1}


def test_log_validation_summary_writes_one_json_record():
    stream = io.StringIO()
    collector = make_collector(stream)
    collector.add_error("a.md", type=taxonomy.YAML_SYNTAX, message="m")

    record = collector.log_validation_summary()

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    logged = json.loads(lines[0])
    assert logged == record
    assert logged["event"] == "validation_summary"
    assert logged["correlation_id"] == collector.correlation.correlation_id
    assert logged["counts"] == {"errors": 1, "warnings": 0}
    assert logged["by_file"] == {"a.md": {"errors": 1, "warnings": 0}}
    assert "timestamp" in logged


def test_log_validation_summary_is_silent_when_disabled():
    stream = io.StringIO()
    collector = make_collector(stream, enabled=False)
    collector.add_error("a.md", type="t", message="m")
    assert collector.log_validation_summary() is None
    assert stream.getvalue() == ""


def test_log_validation_summary_respects_environment_toggle(monkeypatch):
    monkeypatch.delenv("METASCAN_STRUCTURED_LOGGING", raising=False)
    assert StructuredLogSink(io.StringIO()).enabled is False
    monkeypatch.setenv("METASCAN_STRUCTURED_LOGGING", "true")
    assert StructuredLogSink(io.StringIO()).enabled is True


def test_sink_failure_never_raises_or_touches_findings(caplog):
    collector = make_collector(BrokenStream())
    collector.add_error("a.md", type="t", message="m")
    before = collector.errors

    with caplog.at_level(logging.WARNING, logger="metascan"):
        assert collector.log_validation_summary() is None

    assert collector.errors == before
    assert "Structured logging failed" in caplog.text


def test_secret_does_not_affect_equality():
    plain = Finding(file="a.md", type="t", message="m")
    assert plain.secret is None
    assert plain == Finding(file="a.md", type="t", message="m", secret="hidden")
