"""
키 생성 전략

주/군/면 키는 부모 키를 접두어로 가지는 합성 키이다.
계층 연결(graph_binder)은 별도 인덱스 없이 키 문자열을 잘라서 부모를 찾으므로
키 생성 순서(주 → 군 → 면)를 바꾸면 안 된다.
"""

from typing import Callable, List
from dataclasses import dataclass

from hierarchy_parsing.models import RawRecord

KEY_SEPARATOR = "-"


@dataclass(frozen=True)
class KeyScheme:
    """
    키 생성 함수 묶음

    Attributes:
        province: (province_id, record) -> key
        district: (province_id, district_id, record) -> key
        sub_district: (province_id, district_id, sub_district_id, record) -> key
        separator: 세그먼트 구분자 (부모 키 역산에 사용)
    """
    province: Callable[[str, RawRecord], str]
    district: Callable[[str, str, RawRecord], str]
    sub_district: Callable[[str, str, str, RawRecord], str]
    separator: str = KEY_SEPARATOR

    def split(self, key: str) -> List[str]:
        return key.split(self.separator)

    def parent_key(self, key: str) -> str:
        """마지막 세그먼트를 뺀 키 (군 키 → 주 키, 면 키 → 군 키)"""
        parts = self.split(key)
        if len(parts) < 2:
            return ""
        return self.separator.join(parts[:-1])


def _join(*parts: str) -> str:
    return KEY_SEPARATOR.join(parts)


DEFAULT_KEY_SCHEME = KeyScheme(
    province=lambda province_id, _record: province_id,
    district=lambda province_id, district_id, _record: _join(province_id, district_id),
    sub_district=lambda province_id, district_id, sub_district_id, _record: _join(
        province_id, district_id, sub_district_id
    ),
)
