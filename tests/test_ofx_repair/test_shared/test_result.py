"""Tests for repair results and diagnostics."""

import pytest

from ofx_repair.shared.result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    RepairMetrics,
    RepairResult,
)


class TestDiagnosticEntry:
    """Test DiagnosticEntry validation and conversion."""

    def test_valid_entry(self):
        entry = DiagnosticEntry(
            DiagnosticSeverity.WARNING, "Ignored closing tag", "recovery_engine",
            position={"line": 1, "column": 2, "offset": 1},
        )
        assert entry.timestamp > 0
        assert entry.to_dict() == {
            "severity": "WARNING",
            "message": "Ignored closing tag",
            "component": "recovery_engine",
            "position": {"line": 1, "column": 2, "offset": 1},
            "details": None,
        }

    def test_empty_message(self):
        with pytest.raises(ValueError, match="Diagnostic message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "engine")

    def test_empty_component(self):
        with pytest.raises(ValueError, match="Diagnostic component cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "message", "")


class TestRepairMetrics:
    """Test derived metric values."""

    def test_repair_count(self):
        metrics = RepairMetrics(
            containers_auto_closed=2,
            leaf_closes_inferred=3,
            leaf_starts_recovered=1,
            ignored_closes=1,
            containers_closed=10,
        )
        assert metrics.repair_count == 7
        assert metrics.to_dict()["repair_count"] == 7

    def test_bytes_per_second(self):
        assert RepairMetrics(input_bytes=500, processing_time_ms=250).bytes_per_second == 2000
        assert RepairMetrics(input_bytes=500).bytes_per_second == 0.0


class TestRepairResult:
    """Test the repair result container."""

    def test_add_diagnostic_tags_correlation_id(self):
        result = RepairResult(data=b"<OFX></OFX>", correlation_id="abc")
        result.add_diagnostic(DiagnosticSeverity.INFO, "note", "cleaner")
        result.add_diagnostic(DiagnosticSeverity.WARNING, "careful", "engine", details={"tag": "X"})
        assert [entry.correlation_id for entry in result.diagnostics] == ["abc", "abc"]
        assert [entry.message for entry in result.warnings] == ["careful"]

    def test_has_repairs(self):
        result = RepairResult(data=b"")
        assert not result.has_repairs
        result.metrics.leaf_closes_inferred = 1
        assert result.has_repairs

    def test_text(self):
        assert RepairResult(data="<OFX>é</OFX>".encode("utf-8")).text() == "<OFX>é</OFX>"

    def test_summary(self):
        result = RepairResult(data=b"", encoding="cp1252", unclosed_tags=["OFX"])
        result.add_diagnostic(DiagnosticSeverity.WARNING, "unclosed", "engine")
        summary = result.summary()
        assert summary["encoding"] == "cp1252"
        assert summary["unclosed_tags"] == ["OFX"]
        assert summary["diagnostics"][0]["severity"] == "WARNING"
        assert summary["metrics"]["repair_count"] == 0
