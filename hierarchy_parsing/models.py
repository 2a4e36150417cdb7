"""
행정 구역 데이터 클래스

계층 구조:
- 주(province, จังหวัด) → 군(district, อำเภอ) → 면(sub-district, ตำบล/แขวง) → 우편번호

Raw 레코드는 원본에서 읽은 값만 가지고,
Bound 레코드는 부모/자식 연결(그래프)을 가진다.
Bound 레코드는 순환 참조를 가지므로 eq=False (객체 동일성 비교)로 정의한다.
"""

from typing import List, Dict, Optional
from dataclasses import dataclass, field


# =============================================================================
# Raw 레코드
# =============================================================================

@dataclass
class BilingualTitle:
    th: str
    en: str

    def to_dict(self) -> Dict:
        return {'th': self.th, 'en': self.en}


@dataclass
class RawRecord:
    code: str
    title: BilingualTitle


class RawProvince(RawRecord):
    pass


class RawDistrict(RawRecord):
    pass


class RawSubDistrict(RawRecord):
    pass


@dataclass
class RawHierarchy:
    """키 → Raw 레코드 맵 3개 (삽입 순서 = 원본 행 순서)"""
    provinces: Dict[str, RawProvince] = field(default_factory=dict)
    districts: Dict[str, RawDistrict] = field(default_factory=dict)
    sub_districts: Dict[str, RawSubDistrict] = field(default_factory=dict)
    duplicate_keys: List[str] = field(default_factory=list)


# =============================================================================
# Bound 레코드 (그래프)
# =============================================================================

@dataclass(eq=False)
class BoundProvince:
    code: str
    title: BilingualTitle
    districts: List['BoundDistrict'] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class BoundDistrict:
    code: str
    title: BilingualTitle
    province: Optional[BoundProvince] = field(default=None, repr=False)
    sub_districts: List['BoundSubDistrict'] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class BoundSubDistrict:
    code: str
    title: BilingualTitle
    district: Optional[BoundDistrict] = field(default=None, repr=False)
    zip_codes: List['BoundZipCode'] = field(default_factory=list, repr=False)

    @property
    def province(self) -> Optional[BoundProvince]:
        return self.district.province if self.district else None


@dataclass(eq=False)
class BoundZipCode:
    code: str
    sub_districts: List[BoundSubDistrict] = field(default_factory=list)

    def sub_district_codes(self) -> List[str]:
        return [sd.code for sd in self.sub_districts]


@dataclass
class BoundHierarchy:
    """연결된 행정 구역 그래프"""
    provinces: Dict[str, BoundProvince] = field(default_factory=dict)
    districts: Dict[str, BoundDistrict] = field(default_factory=dict)
    sub_districts: Dict[str, BoundSubDistrict] = field(default_factory=dict)
    zip_codes: Dict[str, BoundZipCode] = field(default_factory=dict)


# =============================================================================
# 스크랩한 우편번호 행
# =============================================================================

@dataclass
class PostcodeTuple:
    """PDF/HTML에서 추출한 (주, 군, 우편번호, 비고) 한 건"""
    province_th: str
    district: str
    postal_code: str
    notes: str = ""
    province_en: str = ""

    def to_dict(self) -> Dict:
        return {
            'province_th': self.province_th,
            'province_en': self.province_en,
            'district': self.district,
            'postal_code': self.postal_code,
            'notes': self.notes
        }
