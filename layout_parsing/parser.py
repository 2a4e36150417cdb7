"""
우편번호 PDF 레이아웃 파싱 로직

PDF 표는 페이지당 여러 컬럼으로 배치되어 있고, 각 텍스트 조각의 위치와 폰트로
의미(주 / 군 / 예외 조항 / 우편번호)를 판별한다.

좌표계:
- x: 페이지 왼쪽 기준
- y: 페이지 아래쪽 기준 (값이 클수록 페이지 위쪽)
  PyMuPDF는 위쪽 기준 좌표를 주므로 page_height - origin_y 로 변환한다.
"""
from pathlib import Path
from typing import List, Optional, Tuple
from dataclasses import dataclass, field
import logging
import math
import re

import fitz  # PyMuPDF

from exceptions import MissingSourceError

logger = logging.getLogger(__name__)

KIND_POSTCODE = "postcode"
KIND_DISTRICT = "district"
KIND_PROVINCE = "province"
KIND_CLAUSE = "clause"

POSTCODE_PREFIX_PATTERN = re.compile(r'^\d{5}')


@dataclass(frozen=True)
class LayoutConfig:
    """
    PDF 레이아웃 설정

    원본 PDF 배치가 바뀌면 코드 대신 이 값만 조정한다.
    """
    column_count: int = 7
    indent_offset_x: float = 60.0
    bounding_max_y: float = 2250.0
    province_font: str = "g_d0_f2"
    district_tolerance: float = 20.0
    y_bucket: float = 3.0


@dataclass
class TextFragment:
    """PDF 텍스트 조각 (transform = [a, b, c, d, e, f], e/f가 절대 좌표)"""
    text: str
    transform: Tuple[float, float, float, float, float, float]
    width: float
    height: float
    font_name: str

    @property
    def x(self) -> float:
        return self.transform[4]

    @property
    def y(self) -> float:
        return self.transform[5]


@dataclass
class PdfPage:
    page_num: int
    width: float
    height: float
    fragments: List[TextFragment] = field(default_factory=list)


@dataclass
class PositionedText:
    """컬럼과 종류가 정해진 텍스트 조각"""
    text: str
    x: float
    y: float
    width: float
    height: float
    page_num: int
    column: int
    kind: str


# =============================================================================
# PDF 읽기
# =============================================================================

def read_pdf_fragments(pdf_path: Path) -> List[PdfPage]:
    """
    PDF의 모든 페이지에서 span 단위 텍스트 조각 추출

    Args:
        pdf_path: PDF 파일 경로

    Returns:
        PdfPage 리스트 (page_num은 1부터)
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise MissingSourceError(f"우편번호 PDF를 찾을 수 없습니다: {pdf_path}")

    try:
        doc = fitz.open(str(pdf_path))
    except Exception as e:
        raise MissingSourceError(f"PDF를 열 수 없습니다: {pdf_path}", details=str(e))

    pages = []
    try:
        logger.info(f"PDF 총 페이지 수: {len(doc)}")
        for page_index, page in enumerate(doc):
            page_width = page.rect.width
            page_height = page.rect.height
            pdf_page = PdfPage(page_num=page_index + 1, width=page_width, height=page_height)

            text_dict = page.get_text("dict")
            for block in text_dict.get("blocks", []):
                for line in block.get("lines", []):
                    for span in line.get("spans", []):
                        text = span.get("text", "")
                        if not text.strip():
                            continue
                        origin_x, origin_y = span.get("origin", (0.0, 0.0))
                        x0, y0, x1, y1 = span.get("bbox", (0.0, 0.0, 0.0, 0.0))
                        size = span.get("size", 0.0)
                        pdf_page.fragments.append(TextFragment(
                            text=text,
                            transform=(size, 0.0, 0.0, size, origin_x, page_height - origin_y),
                            width=x1 - x0,
                            height=y1 - y0,
                            font_name=span.get("font", "")
                        ))

            logger.debug(
                f"페이지 {pdf_page.page_num}: {page_width:.1f}x{page_height:.1f}, "
                f"텍스트 조각 {len(pdf_page.fragments)}개"
            )
            pages.append(pdf_page)
    finally:
        doc.close()

    return pages


# =============================================================================
# 컬럼 / 종류 판별
# =============================================================================

def column_criteria(page_width: float, layout: LayoutConfig) -> List[float]:
    """
    컬럼별 왼쪽 경계 x 좌표

    가장 오른쪽 컬럼이 index 0 이다.
    """
    col_width = (page_width - layout.indent_offset_x * 2) / layout.column_count
    return [
        (layout.column_count - i - 1) * col_width + layout.indent_offset_x
        for i in range(layout.column_count)
    ]


def classify_fragment(
    fragment: TextFragment,
    criteria: List[float],
    page_num: int,
    layout: LayoutConfig
) -> Optional[PositionedText]:
    """
    텍스트 조각 하나의 컬럼과 종류 판별

    Returns:
        PositionedText, 버릴 조각이면 None
    """
    text = fragment.text.strip()
    if not text:
        return None

    x = fragment.x
    y = fragment.y
    if y > layout.bounding_max_y:
        return None

    matched = None
    for i, offset_required in enumerate(criteria):
        if x >= offset_required:
            matched = i
            break
    if matched is None:
        return None

    column = layout.column_count - matched
    left_edge = criteria[matched]

    # 우선순위: 우편번호 > 왼쪽 정렬(군) > 주 폰트 > 예외 조항
    if POSTCODE_PREFIX_PATTERN.match(text):
        kind = KIND_POSTCODE
    elif abs(left_edge - x) < layout.district_tolerance:
        kind = KIND_DISTRICT
    elif fragment.font_name == layout.province_font:
        kind = KIND_PROVINCE
    else:
        kind = KIND_CLAUSE

    return PositionedText(
        text=text,
        x=x,
        y=y,
        width=fragment.width,
        height=fragment.height,
        page_num=page_num,
        column=column,
        kind=kind
    )


def classify_page(
    fragments: List[TextFragment],
    page_width: float,
    page_num: int,
    layout: LayoutConfig
) -> List[PositionedText]:
    """페이지의 텍스트 조각을 분류 (버릴 조각 제외, 입력 순서 유지)"""
    criteria = column_criteria(page_width, layout)
    logger.debug(f"페이지 {page_num} 컬럼 경계: {[round(c, 1) for c in criteria]}")

    items = []
    for fragment in fragments:
        item = classify_fragment(fragment, criteria, page_num, layout)
        if item is not None:
            items.append(item)
    return items


def order_fragments(items: List[PositionedText], y_bucket: float) -> List[PositionedText]:
    """
    읽기 순서 정렬: 페이지 → 컬럼 → 위에서 아래(y 구간) → 왼쪽에서 오른쪽
    """
    return sorted(
        items,
        key=lambda d: (d.page_num, d.column, -math.floor(d.y / y_bucket), d.x)
    )


def extract_positioned_text(pages: List[PdfPage], layout: LayoutConfig) -> List[PositionedText]:
    """모든 페이지를 분류하고 읽기 순서로 정렬"""
    items = []
    for page in pages:
        classified = classify_page(page.fragments, page.width, page.page_num, layout)
        logger.debug(f"페이지 {page.page_num}: 분류된 조각 {len(classified)}개")
        items.extend(classified)
    return order_fragments(items, layout.y_bucket)
