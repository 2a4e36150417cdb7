"""Shared fixtures for the postcode compiler tests."""
from typing import List, Sequence, Tuple

import pytest

from hierarchy_parsing.graph_binder import bind_hierarchy
from hierarchy_parsing.models import BoundHierarchy
from hierarchy_parsing.tumbon_parser import TumbonRow, build_hierarchy


def make_row(
    province_id: str,
    province_th: str,
    district_id: str,
    district_name: str,
    sub_district_id: str,
    sub_district_th: str,
    province_en: str = "",
) -> TumbonRow:
    return TumbonRow(
        province_id=province_id,
        province_th=province_th,
        province_en=province_en or f"{province_th}-en",
        district_id=district_id,
        district_en=district_name,
        sub_district_id=sub_district_id,
        sub_district_th=sub_district_th,
        sub_district_en=f"{sub_district_th}-en",
        lat=13.75,
        long=100.5,
    )


def make_bound(rows: Sequence[TumbonRow]) -> BoundHierarchy:
    return bind_hierarchy(build_hierarchy(rows))


@pytest.fixture
def p1_rows() -> List[TumbonRow]:
    """One province P1 with district D1 (S1, S2, S3) and D2 (S4)."""
    return [
        make_row("1", "P1", "11", "D1", "111", "S1"),
        make_row("1", "P1", "11", "D1", "112", "S2"),
        make_row("1", "P1", "11", "D1", "113", "S3"),
        make_row("1", "P1", "12", "D2", "121", "S4"),
    ]


@pytest.fixture
def p1_bound(p1_rows: List[TumbonRow]) -> BoundHierarchy:
    return make_bound(p1_rows)


def titles(sub_districts) -> List[str]:
    return [sd.title.th for sd in sub_districts]


def key_parts(key: str) -> Tuple[str, ...]:
    return tuple(key.split("-"))
