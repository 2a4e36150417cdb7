"""Tests for reconciliation.reconciler module."""
from collections import Counter

from conftest import make_bound, make_row, titles
from hierarchy_parsing.models import BilingualTitle, BoundDistrict, PostcodeTuple
from markup_parsing.exception_rules import ExceptionGrammar
from reconciliation.diagnostics import (
    UNMATCHED_EXCEPTION_NAME,
    UNMATCHED_UNIT,
    DiagnosticSink,
)
from reconciliation.reconciler import (
    Reconciler,
    ZipContribution,
    find_district,
    generate_zip_codes,
    process_reconciliation,
)

GENERIC = ExceptionGrammar(except_word="EXCEPT", use_code_word="USE-CODE", name_markers=())


def tuple_for(district: str, code: str, notes: str = "", province: str = "P1") -> PostcodeTuple:
    return PostcodeTuple(province_th=province, district=district, postal_code=code, notes=notes)


class TestFindDistrict:
    def test_exact_district_name(self, p1_bound) -> None:
        district = find_district(p1_bound, tuple_for("d1", "10110"))
        assert district is p1_bound.districts["1-11"]

    def test_province_substring_match(self, p1_bound) -> None:
        row = tuple_for("D2", "10120", province="จังหวัด P1")
        assert find_district(p1_bound, row) is p1_bound.districts["1-12"]

    def test_province_english_fallback(self, p1_bound) -> None:
        row = PostcodeTuple(province_th="", province_en="P1-EN", district="D1", postal_code="10110")
        assert find_district(p1_bound, row) is p1_bound.districts["1-11"]

    def test_mixed_case_canonical_title(self) -> None:
        bound = make_bound([make_row("10", "P1", "1001", "Phra Nakhon", "100101", "S1")])
        district = find_district(bound, tuple_for("  phra NAKHON ", "10200"))
        assert district is bound.districts["10-1001"]

    def test_no_match(self, p1_bound) -> None:
        assert find_district(p1_bound, tuple_for("D9", "10110")) is None
        assert find_district(p1_bound, tuple_for("D1", "10110", province="P9")) is None
        assert find_district(p1_bound, tuple_for("", "10110")) is None


class TestGenerateZipCodes:
    def test_exception_then_remainder(self, p1_bound) -> None:
        district = p1_bound.districts["1-11"]
        row = tuple_for("D1", "10110", "EXCEPT S2 USE-CODE 10115")
        contributions = list(generate_zip_codes(district, row, GENERIC))

        assert [c.code for c in contributions] == ["10115", "10110"]
        assert titles(contributions[0].sub_districts) == ["S2"]
        assert titles(contributions[1].sub_districts) == ["S1", "S3"]

    def test_no_loss_no_duplication(self, p1_bound) -> None:
        district = p1_bound.districts["1-11"]
        row = tuple_for("D1", "10110", "EXCEPT S1 USE-CODE 10111; EXCEPT S3, S1 USE-CODE 10112")
        contributions = list(generate_zip_codes(district, row, GENERIC))

        assigned = Counter(sd.code for c in contributions for sd in c.sub_districts)
        assert set(assigned) == {sd.code for sd in district.sub_districts}
        assert all(count == 1 for count in assigned.values())

    def test_unknown_name_recorded(self, p1_bound) -> None:
        diagnostics = DiagnosticSink()
        district = p1_bound.districts["1-11"]
        row = tuple_for("D1", "10110", "EXCEPT S9 USE-CODE 10115")
        contributions = list(generate_zip_codes(district, row, GENERIC, diagnostics))

        assert contributions[0].sub_districts == []
        assert titles(contributions[1].sub_districts) == ["S1", "S2", "S3"]
        [event] = diagnostics.of_kind(UNMATCHED_EXCEPTION_NAME)
        assert event.context["name"] == "S9"

    def test_pool_is_a_copy(self, p1_bound) -> None:
        district = p1_bound.districts["1-11"]
        list(generate_zip_codes(district, tuple_for("D1", "10110", "EXCEPT S1 USE-CODE 10111"), GENERIC))
        assert titles(district.sub_districts) == ["S1", "S2", "S3"]


class TestReconciler:
    def test_end_to_end(self, p1_bound) -> None:
        zip_codes = process_reconciliation(
            p1_bound, [tuple_for("D1", "10110", "EXCEPT S2 USE-CODE 10115")], grammar=GENERIC
        )
        assert sorted(zip_codes) == ["10110", "10115"]
        assert titles(zip_codes["10115"].sub_districts) == ["S2"]
        assert titles(zip_codes["10110"].sub_districts) == ["S1", "S3"]

        s2 = p1_bound.sub_districts["1-11-112"]
        assert [z.code for z in s2.zip_codes] == ["10115"]
        assert p1_bound.sub_districts["1-12-121"].zip_codes == []
        assert p1_bound.zip_codes is zip_codes

    def test_unmatched_tuple(self, p1_bound) -> None:
        diagnostics = DiagnosticSink()
        zip_codes = process_reconciliation(p1_bound, [tuple_for("D9", "10190")], diagnostics=diagnostics)
        assert zip_codes == {}
        assert diagnostics.count(UNMATCHED_UNIT) == 1

    def test_empty_contribution_creates_code(self, p1_bound) -> None:
        reconciler = Reconciler(p1_bound)
        reconciler.merge(ZipContribution(code="10199"))
        assert list(reconciler.zip_codes) == ["10199"]
        assert reconciler.zip_codes["10199"].sub_districts == []

    def test_row_code_kept_when_exceptions_take_every_sub_district(self) -> None:
        bound = make_bound([make_row("1", "P1", "11", "D1", "111", "S1")])
        zip_codes = process_reconciliation(
            bound, [tuple_for("D1", "10110", "EXCEPT S1 USE-CODE 10115")], grammar=GENERIC
        )
        assert sorted(zip_codes) == ["10110", "10115"]
        assert zip_codes["10110"].sub_districts == []
        assert titles(zip_codes["10115"].sub_districts) == ["S1"]

    def test_rule_code_kept_when_names_unmatched(self) -> None:
        bound = make_bound([make_row("1", "P1", "11", "D1", "111", "S1")])
        zip_codes = process_reconciliation(
            bound, [tuple_for("D1", "10110", "EXCEPT S9 USE-CODE 10115")], grammar=GENERIC
        )
        assert sorted(zip_codes) == ["10110", "10115"]
        assert zip_codes["10115"].sub_districts == []
        assert titles(zip_codes["10110"].sub_districts) == ["S1"]

    def test_attach_zip_codes_links_sub_districts(self, p1_bound) -> None:
        reconciler = Reconciler(p1_bound, grammar=GENERIC)
        zip_codes = reconciler.reconcile([tuple_for("D2", "10120")])
        assert p1_bound.sub_districts["1-12-121"].zip_codes == []

        reconciler.attach_zip_codes(zip_codes)
        reconciler.attach_zip_codes(zip_codes)
        assert [z.code for z in p1_bound.sub_districts["1-12-121"].zip_codes] == ["10120"]
        assert p1_bound.zip_codes is zip_codes

    def test_same_code_from_two_rows_is_union(self, p1_bound) -> None:
        rows = [tuple_for("D1", "10110"), tuple_for("D2", "10110")]
        zip_codes = process_reconciliation(p1_bound, rows, grammar=GENERIC)
        assert titles(zip_codes["10110"].sub_districts) == ["S1", "S2", "S3", "S4"]

    def test_merge_dedup_on(self, p1_bound) -> None:
        rows = [tuple_for("D1", "10110"), tuple_for("D1", "10110")]
        zip_codes = process_reconciliation(p1_bound, rows, grammar=GENERIC, merge_dedup=True)
        assert titles(zip_codes["10110"].sub_districts) == ["S1", "S2", "S3"]
        assert [z.code for z in p1_bound.sub_districts["1-11-111"].zip_codes] == ["10110"]

    def test_merge_dedup_off(self, p1_bound) -> None:
        rows = [tuple_for("D1", "10110"), tuple_for("D1", "10110")]
        zip_codes = process_reconciliation(p1_bound, rows, grammar=GENERIC, merge_dedup=False)
        assert titles(zip_codes["10110"].sub_districts) == ["S1", "S2", "S3", "S1", "S2", "S3"]
        # back-links stay unique
        assert [z.code for z in p1_bound.sub_districts["1-11-111"].zip_codes] == ["10110"]

    def test_sub_district_with_two_codes(self, p1_bound) -> None:
        rows = [tuple_for("D2", "10120"), tuple_for("D2", "10121")]
        process_reconciliation(p1_bound, rows, grammar=GENERIC)
        assert [z.code for z in p1_bound.sub_districts["1-12-121"].zip_codes] == ["10120", "10121"]

    def test_district_without_sub_districts_skipped(self) -> None:
        bound = make_bound([make_row("1", "P1", "11", "D1", "111", "S1")])
        # a second district with the same name but no sub-districts
        empty = BoundDistrict(code="1-19", title=BilingualTitle(th="D1", en="D1"), province=bound.provinces["1"])
        bound.districts = {"1-19": empty, **bound.districts}

        assert find_district(bound, tuple_for("D1", "10110")) is bound.districts["1-11"]
