"""Tests for layout_parsing.parser module."""
from pathlib import Path

import fitz
import pytest

from exceptions import MissingSourceError
from layout_parsing.parser import (
    KIND_CLAUSE,
    KIND_DISTRICT,
    KIND_POSTCODE,
    KIND_PROVINCE,
    LayoutConfig,
    PositionedText,
    TextFragment,
    classify_page,
    column_criteria,
    extract_positioned_text,
    order_fragments,
    read_pdf_fragments,
)

# 7 columns of width 100 between x=60 and x=760
PAGE_WIDTH = 820.0
LAYOUT = LayoutConfig(province_font="ProvinceFont")


def fragment(text: str, x: float, y: float, font: str = "Body") -> TextFragment:
    return TextFragment(text=text, transform=(1, 0, 0, 1, x, y), width=40.0, height=10.0, font_name=font)


class TestColumnCriteria:
    def test_rightmost_column_first(self) -> None:
        criteria = column_criteria(PAGE_WIDTH, LAYOUT)
        assert criteria == [660.0, 560.0, 460.0, 360.0, 260.0, 160.0, 60.0]


class TestClassifyPage:
    def test_postcode_has_priority(self) -> None:
        # left-hugged and province font, still a postcode
        [item] = classify_page([fragment("10200 ", 160.0, 500.0, "ProvinceFont")], PAGE_WIDTH, 1, LAYOUT)
        assert item.kind == KIND_POSTCODE
        assert item.text == "10200"

    def test_fragment_at_left_edge_is_district(self) -> None:
        [item] = classify_page([fragment("เขตพระนคร", 160.0, 500.0)], PAGE_WIDTH, 1, LAYOUT)
        assert item.kind == KIND_DISTRICT
        assert item.column == 2

    def test_fragment_within_tolerance_is_district(self) -> None:
        [item] = classify_page([fragment("เขตพระนคร", 179.0, 500.0)], PAGE_WIDTH, 1, LAYOUT)
        assert item.kind == KIND_DISTRICT

    def test_fragment_beyond_tolerance_is_clause(self) -> None:
        [item] = classify_page([fragment("ยกเว้นแขวงวังบูรพาภิรมย์", 181.0, 500.0)], PAGE_WIDTH, 1, LAYOUT)
        assert item.kind == KIND_CLAUSE
        assert item.column == 2

    def test_province_font(self) -> None:
        [item] = classify_page([fragment("กรุงเทพมหานคร", 200.0, 500.0, "ProvinceFont")], PAGE_WIDTH, 1, LAYOUT)
        assert item.kind == KIND_PROVINCE

    def test_columns_numbered_left_to_right(self) -> None:
        items = classify_page(
            [fragment("a", 70.0, 500.0), fragment("b", 700.0, 500.0)], PAGE_WIDTH, 1, LAYOUT
        )
        assert [i.column for i in items] == [1, 7]

    def test_discards_blank_margin_and_footer(self) -> None:
        items = classify_page(
            [
                fragment("   ", 200.0, 500.0),
                fragment("margin", 30.0, 500.0),
                fragment("header", 200.0, 2300.0),
            ],
            PAGE_WIDTH, 1, LAYOUT
        )
        assert items == []


class TestOrderFragments:
    def test_reading_order(self) -> None:
        def item(text: str, column: int, x: float, y: float, page: int = 1) -> PositionedText:
            return PositionedText(text, x, y, 1.0, 1.0, page, column, KIND_CLAUSE)

        items = [
            item("page2", 1, 70.0, 800.0, page=2),
            item("col2-top", 2, 170.0, 800.0),
            item("col1-bottom", 1, 70.0, 100.0),
            item("col1-top-right", 1, 120.0, 800.5),
            item("col1-top-left", 1, 70.0, 799.5),
        ]
        ordered = order_fragments(items, 3.0)
        assert [i.text for i in ordered] == [
            "col1-top-left", "col1-top-right", "col1-bottom", "col2-top", "page2"
        ]


class TestReadPdfFragments:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MissingSourceError):
            read_pdf_fragments(tmp_path / "missing.pdf")

    def test_reads_bottom_origin_positions(self, tmp_path: Path) -> None:
        pdf_path = tmp_path / "postalcode.pdf"
        doc = fitz.open()
        page = doc.new_page(width=820, height=600)
        page.insert_text((160, 100), "Bangkok", fontsize=10)
        page.insert_text((170, 120), "10200", fontsize=10)
        doc.save(str(pdf_path))
        doc.close()

        [pdf_page] = read_pdf_fragments(pdf_path)
        assert pdf_page.page_num == 1
        assert pdf_page.width == pytest.approx(820)
        texts = {f.text.strip(): f for f in pdf_page.fragments}
        assert texts["Bangkok"].x == pytest.approx(160, abs=0.5)
        assert texts["Bangkok"].y == pytest.approx(500, abs=0.5)
        assert texts["Bangkok"].y > texts["10200"].y

        items = extract_positioned_text([pdf_page], LAYOUT)
        assert [(i.text, i.kind) for i in items] == [
            ("Bangkok", KIND_DISTRICT), ("10200", KIND_POSTCODE)
        ]
