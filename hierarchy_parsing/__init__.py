"""행정 구역 계층 파싱 모듈"""

from .tumbon_parser import parse_tumbon_file, build_hierarchy, read_tumbon_rows
from .graph_binder import bind_hierarchy
from .key_scheme import KeyScheme, DEFAULT_KEY_SCHEME

__all__ = [
    'parse_tumbon_file',
    'build_hierarchy',
    'read_tumbon_rows',
    'bind_hierarchy',
    'KeyScheme',
    'DEFAULT_KEY_SCHEME'
]
