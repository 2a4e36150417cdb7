"""위키 HTML 우편번호 파싱 모듈"""

from .exception_rules import ExceptionGrammar, ExceptionRule, parse_exception_rules, THAI_GRAMMAR
from .wiki_parser import parse_wiki_html, build_province_lookup, process_wiki_postcodes

__all__ = [
    'ExceptionGrammar',
    'ExceptionRule',
    'parse_exception_rules',
    'THAI_GRAMMAR',
    'parse_wiki_html',
    'build_province_lookup',
    'process_wiki_postcodes'
]
