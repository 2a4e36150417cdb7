"""Tests for export.graph_exporter and utils.check_graph modules."""
import json
from pathlib import Path

import pytest

from exceptions import ExportError
from export.graph_exporter import GraphExporter, process_graph_export
from markup_parsing.exception_rules import ExceptionGrammar
from hierarchy_parsing.models import PostcodeTuple
from reconciliation.diagnostics import DiagnosticSink
from reconciliation.reconciler import process_reconciliation
from utils.check_graph import analyze_graph, check_graph_structure, find_province

GENERIC = ExceptionGrammar(except_word="EXCEPT", use_code_word="USE-CODE", name_markers=())


@pytest.fixture
def reconciled(p1_bound):
    diagnostics = DiagnosticSink()
    rows = [
        PostcodeTuple(province_th="P1", district="D1", postal_code="10110", notes="EXCEPT S2 USE-CODE 10115"),
        PostcodeTuple(province_th="P1", district="D9", postal_code="10190"),
    ]
    process_reconciliation(p1_bound, rows, grammar=GENERIC, diagnostics=diagnostics)
    return p1_bound, diagnostics


class TestGraphExporter:
    def test_document_shape(self, reconciled) -> None:
        bound, diagnostics = reconciled
        data = GraphExporter(bound, diagnostics).to_dict()

        [province] = data["provinces"]
        assert province["code"] == "1"
        assert province["title"] == {"th": "P1", "en": "P1-en"}
        assert [d["code"] for d in province["districts"]] == ["1-11", "1-12"]

        s2 = province["districts"][0]["subDistricts"][1]
        assert s2["code"] == "1-11-112"
        assert s2["zipCodes"] == ["10115"]

        assert data["zipCodes"] == [
            {"code": "10110", "subDistricts": ["1-11-111", "1-11-113"]},
            {"code": "10115", "subDistricts": ["1-11-112"]},
        ]
        assert data["diagnostics"] == {
            "duplicateSubDistricts": 0,
            "unmatchedTuples": 1,
            "unmatchedExceptionNames": 0,
        }

    def test_save_writes_utf8_json(self, reconciled, tmp_path: Path) -> None:
        bound, diagnostics = reconciled
        output = process_graph_export(bound, tmp_path / "out" / "postcodes.json", diagnostics)

        with open(output, encoding="utf-8") as f:
            data = json.load(f)
        assert len(data["zipCodes"]) == 2

    def test_save_failure(self, reconciled, tmp_path: Path) -> None:
        bound, _ = reconciled
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(ExportError):
            GraphExporter(bound).save(blocker / "postcodes.json")


class TestCheckGraph:
    def test_exported_graph_is_consistent(self, reconciled) -> None:
        bound, diagnostics = reconciled
        data = GraphExporter(bound, diagnostics).to_dict()

        assert check_graph_structure(data) == []
        stats = analyze_graph(data)
        assert stats["주"] == 1
        assert stats["면"] == 4
        assert stats["우편번호"] == 2
        assert stats["우편번호 없는 면"] == 1

    def test_detects_broken_links(self) -> None:
        data = {
            "provinces": [{
                "code": "1",
                "districts": [{
                    "code": "2-11",
                    "subDistricts": [{"code": "2-11-111", "zipCodes": []}],
                }],
            }],
            "zipCodes": [{"code": "10110", "subDistricts": ["2-11-111", "9-99-999"]}],
        }
        issues = check_graph_structure(data)
        assert len(issues) == 3

    def test_find_province(self, reconciled) -> None:
        bound, _ = reconciled
        data = GraphExporter(bound).to_dict()
        assert find_province(data, code="1")["code"] == "1"
        assert find_province(data, name="p1-EN")["code"] == "1"
        assert find_province(data, code="9") is None
