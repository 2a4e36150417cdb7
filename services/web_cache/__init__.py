"""문서 요청 / 디스크 캐시"""

from .cached_fetcher import get_cached_text, fetch_text

__all__ = ['get_cached_text', 'fetch_text']
