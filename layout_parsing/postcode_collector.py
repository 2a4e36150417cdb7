"""
분류된 텍스트 조각 → 우편번호 레코드

읽기 순서로 정렬된 조각을 한 번 훑으면서 현재 주/군/예외 조항을 상태로 들고,
우편번호 조각이 나올 때마다 레코드를 만든다.
"""
import logging
from pathlib import Path
from typing import List, Iterable
from dataclasses import dataclass

from hierarchy_parsing.models import PostcodeTuple
from layout_parsing.parser import (
    LayoutConfig,
    PositionedText,
    KIND_POSTCODE,
    KIND_DISTRICT,
    KIND_PROVINCE,
    KIND_CLAUSE,
    read_pdf_fragments,
    extract_positioned_text,
)

logger = logging.getLogger(__name__)


@dataclass
class PostcodeRecord:
    province: str
    district: str
    postal_code: str
    exception_notes: str

    def to_tuple(self) -> PostcodeTuple:
        return PostcodeTuple(
            province_th=self.province,
            district=self.district,
            postal_code=self.postal_code,
            notes=self.exception_notes
        )


class PostcodeCollector:
    """주/군/예외 조항 상태 기계"""

    def __init__(self):
        self.current_province = ""
        self.current_district = ""
        self.current_clauses: List[str] = []
        self.out: List[PostcodeRecord] = []

    def collect(self, item: PositionedText) -> None:
        if item.kind == KIND_PROVINCE:
            self.current_province = item.text
            self.current_clauses = []
        elif item.kind == KIND_DISTRICT:
            self.current_district = item.text
            self.current_clauses = []
        elif item.kind == KIND_CLAUSE:
            self.current_clauses.append(item.text)
        elif item.kind == KIND_POSTCODE:
            # 주/군은 유지 (한 군에 우편번호가 여러 개일 수 있음)
            record = PostcodeRecord(
                province=self.current_province,
                district=self.current_district,
                postal_code=item.text,
                exception_notes=" ".join(self.current_clauses)
            )
            self.out.append(record)
            logger.debug(f"우편번호 레코드: {record}")
            self.current_clauses = []

    def collect_all(self, items: Iterable[PositionedText]) -> List[PostcodeRecord]:
        for item in items:
            self.collect(item)
        return self.out


def parse_postcode_pdf(pdf_path: Path, layout: LayoutConfig) -> List[PostcodeTuple]:
    """
    우편번호 PDF → PostcodeTuple 리스트

    Args:
        pdf_path: postalcode.pdf 경로
        layout: 레이아웃 설정

    Returns:
        PostcodeTuple 리스트 (PDF 읽기 순서)
    """
    pages = read_pdf_fragments(pdf_path)
    items = extract_positioned_text(pages, layout)

    collector = PostcodeCollector()
    records = collector.collect_all(items)
    logger.info(f"PDF에서 우편번호 레코드 {len(records)}개 추출")

    return [record.to_tuple() for record in records]
