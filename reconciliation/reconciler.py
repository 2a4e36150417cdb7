"""
우편번호 행 ↔ 행정 구역 그래프 병합

행마다:
1. 주 이름(부분 일치 허용) + 군 이름(정확히 일치)으로 군 찾기
2. 군의 모든 면을 풀(pool)로 두고, 비고의 예외 규칙이 지목한 면을 풀에서 빼서
   규칙의 우편번호에 배정
3. 남은 면은 행의 우편번호에 배정

한 행 안에서는 면이 두 우편번호에 중복 배정되거나 누락되지 않는다.
"""
import logging
from typing import List, Dict, Iterable, Iterator, Optional
from dataclasses import dataclass, field

from hierarchy_parsing.models import (
    BoundHierarchy,
    BoundProvince,
    BoundDistrict,
    BoundSubDistrict,
    BoundZipCode,
    PostcodeTuple,
)
from markup_parsing.exception_rules import ExceptionGrammar, THAI_GRAMMAR, parse_exception_rules
from reconciliation.diagnostics import DiagnosticSink, UNMATCHED_UNIT, UNMATCHED_EXCEPTION_NAME

logger = logging.getLogger(__name__)


@dataclass
class ZipContribution:
    """한 행에서 나온 (우편번호 → 면 목록) 배정"""
    code: str
    sub_districts: List[BoundSubDistrict] = field(default_factory=list)


def _normalize(name: str) -> str:
    return (name or "").lower().strip()


def _names_overlap(canonical: str, scraped: str) -> bool:
    """같거나 한쪽이 다른 쪽을 포함 (약칭 허용)"""
    if not canonical or not scraped:
        return False
    return canonical == scraped or scraped in canonical or canonical in scraped


def province_matches(province: BoundProvince, row: PostcodeTuple) -> bool:
    if _names_overlap(_normalize(province.title.th), _normalize(row.province_th)):
        return True
    return _names_overlap(_normalize(province.title.en), _normalize(row.province_en))


def find_district(bound: BoundHierarchy, row: PostcodeTuple) -> Optional[BoundDistrict]:
    """행에 해당하는 군 (면이 하나 이상 있는 첫 번째 군)"""
    district_name = _normalize(row.district)
    if not district_name:
        return None

    for district in bound.districts.values():
        if not district.sub_districts:
            continue
        if _normalize(district.title.th) != district_name:
            continue
        if district.province is not None and province_matches(district.province, row):
            return district
    return None


def generate_zip_codes(
    district: BoundDistrict,
    row: PostcodeTuple,
    grammar: ExceptionGrammar = THAI_GRAMMAR,
    diagnostics: Optional[DiagnosticSink] = None
) -> Iterator[ZipContribution]:
    """
    한 행의 우편번호 배정 생성

    예외 규칙 배정을 먼저 내보내고, 마지막에 남은 면을 행의 우편번호로 내보낸다.
    """
    pool = list(district.sub_districts)

    for rule in parse_exception_rules(row.notes, grammar):
        removed = []
        for name in rule.sub_district_names:
            idx = next((i for i, sd in enumerate(pool) if sd.title.th == name), -1)
            if idx == -1:
                message = (
                    f"예외 규칙의 면을 찾을 수 없습니다: '{name}' "
                    f"({row.province_th}/{row.district}, {rule.postal_code})"
                )
                if diagnostics is not None:
                    diagnostics.record(
                        UNMATCHED_EXCEPTION_NAME, message,
                        name=name, district=district.code, postal_code=rule.postal_code
                    )
                else:
                    logger.warning(message)
                continue
            removed.append(pool.pop(idx))

        yield ZipContribution(code=rule.postal_code, sub_districts=removed)

    yield ZipContribution(code=row.postal_code, sub_districts=pool)


class Reconciler:
    """우편번호 행 병합기"""

    def __init__(
        self,
        bound: BoundHierarchy,
        grammar: ExceptionGrammar = THAI_GRAMMAR,
        merge_dedup: bool = True,
        diagnostics: Optional[DiagnosticSink] = None
    ):
        self.bound = bound
        self.grammar = grammar
        self.merge_dedup = merge_dedup
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticSink()
        self.zip_codes: Dict[str, BoundZipCode] = {}

    def merge(self, contribution: ZipContribution) -> None:
        """
        배정을 누적 맵에 병합

        merge_dedup=True면 이미 같은 코드의 면이 있는 우편번호에는 다시 넣지 않는다.
        False면 그대로 이어 붙인다.
        면이 없는 배정도 우편번호 항목은 만든다.
        """
        zip_code = self.zip_codes.get(contribution.code)
        if zip_code is None:
            zip_code = BoundZipCode(code=contribution.code)
            self.zip_codes[contribution.code] = zip_code

        if self.merge_dedup:
            existing = {sd.code for sd in zip_code.sub_districts}
            for sub_district in contribution.sub_districts:
                if sub_district.code not in existing:
                    zip_code.sub_districts.append(sub_district)
                    existing.add(sub_district.code)
        else:
            zip_code.sub_districts.extend(contribution.sub_districts)

    def reconcile_row(self, row: PostcodeTuple) -> List[ZipContribution]:
        district = find_district(self.bound, row)
        if district is None:
            self.diagnostics.record(
                UNMATCHED_UNIT,
                f"매칭 실패: {_normalize(row.province_th)}/{_normalize(row.district)} ({row.postal_code})",
                province=row.province_th, district=row.district, postal_code=row.postal_code
            )
            return []

        contributions = list(generate_zip_codes(district, row, self.grammar, self.diagnostics))
        for contribution in contributions:
            self.merge(contribution)
        return contributions

    def reconcile(self, rows: Iterable[PostcodeTuple]) -> Dict[str, BoundZipCode]:
        """
        모든 행 병합

        Returns:
            우편번호 → BoundZipCode
        """
        row_count = 0
        for row in rows:
            row_count += 1
            self.reconcile_row(row)

        logger.info(
            f"우편번호 행 {row_count}개 처리 → 우편번호 {len(self.zip_codes)}개 "
            f"(매칭 실패 {self.diagnostics.count(UNMATCHED_UNIT)}건)"
        )
        return self.zip_codes

    def attach_zip_codes(self, zip_codes: Optional[Dict[str, BoundZipCode]] = None) -> None:
        """우편번호를 각 면의 zip_codes에 연결하고 그래프에 저장 (기본값: 병합 결과)"""
        if zip_codes is None:
            zip_codes = self.zip_codes
        for zip_code in zip_codes.values():
            for sub_district in zip_code.sub_districts:
                if not any(z is zip_code for z in sub_district.zip_codes):
                    sub_district.zip_codes.append(zip_code)
        self.bound.zip_codes = zip_codes


def process_reconciliation(
    bound: BoundHierarchy,
    rows: Iterable[PostcodeTuple],
    grammar: ExceptionGrammar = THAI_GRAMMAR,
    merge_dedup: bool = True,
    diagnostics: Optional[DiagnosticSink] = None
) -> Dict[str, BoundZipCode]:
    """병합 후 그래프에 연결까지 수행"""
    reconciler = Reconciler(bound, grammar=grammar, merge_dedup=merge_dedup, diagnostics=diagnostics)
    zip_codes = reconciler.reconcile(rows)
    reconciler.attach_zip_codes(zip_codes)
    return zip_codes
