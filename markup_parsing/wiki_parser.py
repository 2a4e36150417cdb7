"""
위키백과 우편번호 목록 HTML 파싱

구조:
- 주마다 id 속성이 있는 h2 제목 ("กรุงเทพมหานคร" 또는 "ชื่อไทย (English)")
- 제목 블록 바로 다음 형제가 표: 군 | 우편번호 | 비고
- 첫 행은 헤더

주 제목이 기준 계층에 없으면 원본 구조가 바뀐 것으로 보고 즉시 실패한다.
"""
import logging
import re
from pathlib import Path
from typing import List, Dict, Iterable, Optional

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from exceptions import ProvinceValidationError, SourceFormatError
from hierarchy_parsing.models import BoundProvince, PostcodeTuple
from services.web_cache import get_cached_text

logger = logging.getLogger(__name__)

PROVINCE_HEADING_PATTERN = re.compile(r'^([^\s(]+)(?:\s*\(([^)]+)\))?')
POSTCODE_PATTERN = re.compile(r'\d{5}')
PROVINCE_ABBREVIATION = "จ. "


def normalize_province_name(name: str) -> str:
    return name.lower().strip().replace(PROVINCE_ABBREVIATION, "").strip()


def build_province_lookup(provinces: Iterable[BoundProvince]) -> Dict[str, BoundProvince]:
    """정규화한 태국어 주 이름 → BoundProvince"""
    lookup = {}
    for province in provinces:
        lookup[normalize_province_name(province.title.th)] = province
    return lookup


def _text(element: Tag) -> str:
    return " ".join(element.get_text().split())


def _heading_text(h2: Tag) -> str:
    headline = h2.find(class_="mw-headline")
    if headline is not None:
        text = _text(headline)
        if text:
            return text
    return _text(h2)


def _section_table(h2: Tag) -> Optional[Tag]:
    """제목 다음 표 찾기 (MediaWiki는 h2를 div.mw-heading으로 감싼다)"""
    block = h2
    parent = h2.parent
    if parent is not None and parent.name == "div" and "mw-heading" in (parent.get("class") or []):
        block = parent

    sibling = block.find_next_sibling()
    if sibling is not None and sibling.name == "table":
        return sibling
    return None


def parse_wiki_html(html: str, province_lookup: Dict[str, BoundProvince]) -> List[PostcodeTuple]:
    """
    HTML → PostcodeTuple 리스트

    Args:
        html: 위키 문서 HTML
        province_lookup: build_province_lookup 결과

    Returns:
        PostcodeTuple 리스트 (한 행의 우편번호가 여러 개면 우편번호마다 한 건)
    """
    soup = BeautifulSoup(html, "html.parser")
    records = []

    for h2 in soup.find_all("h2", id=True):
        heading = _heading_text(h2)
        if not heading:
            continue

        match = PROVINCE_HEADING_PATTERN.match(heading)
        province_name = match.group(1) if match else heading

        province = province_lookup.get(normalize_province_name(province_name))
        if province is None:
            raise ProvinceValidationError(
                f"위키 주 제목 '{province_name}'이(가) 행정 구역 데이터의 어떤 주와도 매칭되지 않습니다",
                details=", ".join(province_lookup.keys())
            )

        table = _section_table(h2)
        if table is None:
            logger.debug(f"'{province_name}' 다음에 표가 없습니다")
            continue

        for row_index, row in enumerate(table.find_all("tr")):
            if row_index == 0:
                continue

            cells = row.find_all("td")
            if len(cells) < 2:
                continue

            district = _text(cells[0])
            codes = POSTCODE_PATTERN.findall(_text(cells[1]))
            notes = _text(cells[2]) if len(cells) > 2 else ""
            if not district or not codes:
                continue

            for code in codes:
                records.append(PostcodeTuple(
                    province_th=province.title.th,
                    province_en=province.title.en,
                    district=district,
                    postal_code=code,
                    notes=notes
                ))

    return records


def process_wiki_postcodes(
    provinces: Iterable[BoundProvince],
    url: str,
    cache_dir: Path,
    cache_prefix: str,
    ttl_days: int = 7,
    timeout: int = 60,
    session: Optional[requests.Session] = None
) -> List[PostcodeTuple]:
    """
    캐시/요청으로 위키 HTML을 얻어서 우편번호 행 추출

    Returns:
        PostcodeTuple 리스트
    """
    lookup = build_province_lookup(provinces)
    html = get_cached_text(
        url, cache_prefix, cache_dir,
        ttl_days=ttl_days, timeout=timeout, session=session
    )

    records = parse_wiki_html(html, lookup)
    logger.info(f"위키에서 우편번호 레코드 {len(records)}개 추출")
    if not records:
        raise SourceFormatError("위키 문서에서 우편번호 데이터를 찾을 수 없습니다")
    return records
