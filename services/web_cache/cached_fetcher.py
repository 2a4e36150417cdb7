"""
만료일 기반 디스크 캐시가 있는 문서 요청

캐시 파일 이름: <prefix>-<YYYY-MM-DD>.html (날짜 = 만료일)
- 만료되지 않은 파일이 있으면 그대로 사용
- 만료된 파일은 삭제
- 캐시가 없으면 요청 후 오늘 + ttl_days 날짜로 저장

단일 프로세스 사용 전제 (프로세스 간 잠금 없음)
"""
import logging
import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional, List, Tuple

import requests

from exceptions import FetchError

logger = logging.getLogger(__name__)

CACHE_SUFFIX = ".html"
DEFAULT_HEADERS = {
    "User-Agent": "thai-postcode-compiler/1.0"
}


def _cache_pattern(prefix: str) -> re.Pattern:
    return re.compile(rf'^{re.escape(prefix)}-(\d{{4}}-\d{{2}}-\d{{2}}){re.escape(CACHE_SUFFIX)}$')


def cache_file_name(prefix: str, expires_on: date) -> str:
    return f"{prefix}-{expires_on.isoformat()}{CACHE_SUFFIX}"


def list_cache_files(cache_dir: Path, prefix: str) -> List[Tuple[Path, date]]:
    """prefix에 해당하는 캐시 파일과 만료일 목록 (만료일 늦은 순)"""
    cache_dir = Path(cache_dir)
    if not cache_dir.exists():
        return []

    pattern = _cache_pattern(prefix)
    files = []
    for path in cache_dir.iterdir():
        match = pattern.match(path.name)
        if not match:
            continue
        try:
            expires_on = datetime.strptime(match.group(1), "%Y-%m-%d").date()
        except ValueError:
            logger.warning(f"캐시 파일 날짜를 해석할 수 없습니다: {path.name}")
            continue
        files.append((path, expires_on))

    files.sort(key=lambda x: x[1], reverse=True)
    return files


def read_valid_cache(cache_dir: Path, prefix: str, today: Optional[date] = None) -> Optional[str]:
    """
    유효한 캐시 내용 반환, 만료된 캐시 파일은 삭제

    Returns:
        캐시 내용 또는 None
    """
    today = today or date.today()
    content = None
    for path, expires_on in list_cache_files(cache_dir, prefix):
        if expires_on >= today:
            if content is None:
                logger.info(f"캐시 사용: {path.name}")
                content = path.read_text(encoding='utf-8')
        else:
            logger.info(f"만료된 캐시 삭제: {path.name}")
            path.unlink()
    return content


def write_cache(cache_dir: Path, prefix: str, content: str, ttl_days: int, today: Optional[date] = None) -> Path:
    today = today or date.today()
    cache_dir = Path(cache_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)

    cache_path = cache_dir / cache_file_name(prefix, today + timedelta(days=ttl_days))
    cache_path.write_text(content, encoding='utf-8')
    logger.info(f"캐시 저장: {cache_path}")
    return cache_path


def fetch_text(url: str, timeout: int = 60, session: Optional[requests.Session] = None) -> str:
    """
    URL 내용을 텍스트로 요청

    Raises:
        FetchError: 요청 실패 또는 성공이 아닌 응답
    """
    http = session or requests
    try:
        logger.info(f"문서 요청 전송: {url}")
        response = http.get(url, headers=DEFAULT_HEADERS, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f"문서 요청 실패: {e}", exc_info=True)
        raise FetchError(f"문서 요청 실패: {url}", details=str(e))

    if not response.ok:
        logger.error(f"문서 요청 실패 ({response.status_code}): {url}")
        raise FetchError(
            f"문서 요청 실패 ({response.status_code} {response.reason}): {url}",
            details=response.text[:500]
        )

    response.encoding = response.encoding or 'utf-8'
    logger.info(f"문서 수신: {len(response.text)} chars")
    return response.text


def get_cached_text(
    url: str,
    prefix: str,
    cache_dir: Path,
    ttl_days: int = 7,
    timeout: int = 60,
    session: Optional[requests.Session] = None,
    today: Optional[date] = None
) -> str:
    """
    캐시가 유효하면 캐시 내용, 아니면 요청 후 캐시에 저장한 내용 반환

    Args:
        url: 요청 URL
        prefix: 캐시 파일 이름 접두어
        cache_dir: 캐시 디렉토리
        ttl_days: 보관 기간 (일)
        timeout: 요청 타임아웃 (초)
        session: requests 세션 (테스트에서 대체 가능)
        today: 기준 날짜 (기본값: 오늘)

    Returns:
        문서 텍스트
    """
    cached = read_valid_cache(cache_dir, prefix, today)
    if cached is not None:
        return cached

    content = fetch_text(url, timeout=timeout, session=session)
    write_cache(cache_dir, prefix, content, ttl_days, today)
    return content
