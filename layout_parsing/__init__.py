"""우편번호 PDF 레이아웃 파싱 모듈"""

from .parser import LayoutConfig, read_pdf_fragments, classify_page, order_fragments
from .postcode_collector import PostcodeCollector, parse_postcode_pdf

__all__ = [
    'LayoutConfig',
    'read_pdf_fragments',
    'classify_page',
    'order_fragments',
    'PostcodeCollector',
    'parse_postcode_pdf'
]
