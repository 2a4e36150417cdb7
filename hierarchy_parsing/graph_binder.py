"""Raw 레코드 맵 → 주 ↔ 군 ↔ 면 연결 그래프"""
import logging

from exceptions import HierarchyBindingError
from hierarchy_parsing.key_scheme import KeyScheme, DEFAULT_KEY_SCHEME
from hierarchy_parsing.models import (
    RawHierarchy,
    BoundHierarchy,
    BoundProvince,
    BoundDistrict,
    BoundSubDistrict,
)

logger = logging.getLogger(__name__)


def bind_hierarchy(raw: RawHierarchy, key_scheme: KeyScheme = DEFAULT_KEY_SCHEME) -> BoundHierarchy:
    """
    Raw 맵을 연결된 그래프로 변환

    부모는 키 문자열에서 마지막 세그먼트를 제거해서 찾는다.
    부모 키가 맵에 없으면 키 생성기와 연결기의 키 체계가 어긋난 것이므로 즉시 실패한다.

    Args:
        raw: build_hierarchy 결과
        key_scheme: build_hierarchy에 사용한 것과 같은 키 생성 전략

    Returns:
        BoundHierarchy (zip_codes는 비어 있음)
    """
    bound = BoundHierarchy()

    for key, province in raw.provinces.items():
        bound.provinces[key] = BoundProvince(code=province.code, title=province.title)

    for key, district in raw.districts.items():
        parent_key = key_scheme.parent_key(key)
        parent = bound.provinces.get(parent_key)
        if parent is None:
            raise HierarchyBindingError(
                f"군 '{key}'의 주 '{parent_key}'를 찾을 수 없습니다",
                details=f"separator={key_scheme.separator!r}"
            )
        bound_district = BoundDistrict(code=district.code, title=district.title, province=parent)
        parent.districts.append(bound_district)
        bound.districts[key] = bound_district

    for key, sub_district in raw.sub_districts.items():
        parent_key = key_scheme.parent_key(key)
        parent = bound.districts.get(parent_key)
        if parent is None:
            raise HierarchyBindingError(
                f"면 '{key}'의 군 '{parent_key}'를 찾을 수 없습니다",
                details=f"separator={key_scheme.separator!r}"
            )
        bound_sub_district = BoundSubDistrict(
            code=sub_district.code, title=sub_district.title, district=parent
        )
        parent.sub_districts.append(bound_sub_district)
        bound.sub_districts[key] = bound_sub_district

    logger.info(
        f"그래프 연결 완료: 주 {len(bound.provinces)}개, "
        f"군 {len(bound.districts)}개, 면 {len(bound.sub_districts)}개"
    )
    return bound
