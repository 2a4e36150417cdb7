"""설정 로더"""
import os
import logging
from pathlib import Path
from typing import Optional, Tuple
from dataclasses import dataclass

from exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_WIKI_URL = (
    "https://th.wikipedia.org/wiki/"
    "%E0%B8%A3%E0%B8%B2%E0%B8%A2%E0%B8%81%E0%B8%B2%E0%B8%A3"
    "%E0%B8%A3%E0%B8%AB%E0%B8%B1%E0%B8%AA"
    "%E0%B9%84%E0%B8%9B%E0%B8%A3%E0%B8%A9%E0%B8%93%E0%B8%B5%E0%B8%A2%E0%B9%8C"
    "%E0%B9%84%E0%B8%97%E0%B8%A2"
)
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

POSTCODE_SOURCE_WIKI = "wiki"
POSTCODE_SOURCE_PDF = "pdf"


@dataclass
class Config:
    """설정 데이터 클래스"""
    # 원본 경로 설정
    source_dir: str = "sources"
    tumbon_file: str = "tumbon.xlsx"
    postcode_pdf_file: str = "postalcode.pdf"
    postcode_source: str = POSTCODE_SOURCE_WIKI

    # 위키 문서 / 캐시 설정
    wiki_url: str = DEFAULT_WIKI_URL
    cache_dir: str = ".cache"
    cache_prefix: str = "wikipedia-postal-codes"
    cache_ttl_days: int = 7
    fetch_timeout: int = 60

    # 출력 설정
    output_dir: str = "output"
    output_graph_file: str = "postcodes.json"

    # 병합 설정
    merge_dedup: bool = True

    # PDF 레이아웃 설정 (원본 문서가 바뀌면 이 값만 조정)
    layout_column_count: int = 7
    layout_indent_offset_x: float = 60.0
    layout_bounding_max_y: float = 2250.0
    layout_province_font: str = "g_d0_f2"
    layout_district_tolerance: float = 20.0
    layout_y_bucket: float = 3.0

    # 예외 조항 문법
    except_word: str = "ยกเว้น"
    use_code_word: str = "ใช้รหัส"
    name_markers: Tuple[str, ...] = ("ตำบล", "แขวง")

    # 로깅 설정
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT

    @property
    def tumbon_path(self) -> Path:
        return Path(self.source_dir) / self.tumbon_file

    @property
    def postcode_pdf_path(self) -> Path:
        return Path(self.source_dir) / self.postcode_pdf_file

    @property
    def output_graph_path(self) -> Path:
        return Path(self.output_dir) / self.output_graph_file

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'Config':
        """환경 변수 또는 .env 파일에서 설정 로드"""
        if env_file:
            _load_env_file(env_file)

        postcode_source = os.getenv("POSTCODE_SOURCE", POSTCODE_SOURCE_WIKI).strip().lower()
        if postcode_source not in (POSTCODE_SOURCE_WIKI, POSTCODE_SOURCE_PDF):
            raise ConfigError(f"알 수 없는 POSTCODE_SOURCE 값: {postcode_source}")

        return cls(
            source_dir=os.getenv("SOURCE_DIR", "sources"),
            tumbon_file=os.getenv("TUMBON_FILE", "tumbon.xlsx"),
            postcode_pdf_file=os.getenv("POSTCODE_PDF_FILE", "postalcode.pdf"),
            postcode_source=postcode_source,
            wiki_url=os.getenv("WIKI_URL", DEFAULT_WIKI_URL),
            cache_dir=os.getenv("CACHE_DIR", ".cache"),
            cache_prefix=os.getenv("CACHE_PREFIX", "wikipedia-postal-codes"),
            cache_ttl_days=_get_int("CACHE_TTL_DAYS", 7),
            fetch_timeout=_get_int("FETCH_TIMEOUT", 60),
            output_dir=os.getenv("OUTPUT_DIR", "output"),
            output_graph_file=os.getenv("OUTPUT_GRAPH_FILE", "postcodes.json"),
            merge_dedup=_get_bool("MERGE_DEDUP", True),
            layout_column_count=_get_int("LAYOUT_COLUMN_COUNT", 7),
            layout_indent_offset_x=_get_float("LAYOUT_INDENT_OFFSET_X", 60.0),
            layout_bounding_max_y=_get_float("LAYOUT_BOUNDING_MAX_Y", 2250.0),
            layout_province_font=os.getenv("LAYOUT_PROVINCE_FONT", "g_d0_f2"),
            layout_district_tolerance=_get_float("LAYOUT_DISTRICT_TOLERANCE", 20.0),
            layout_y_bucket=_get_float("LAYOUT_Y_BUCKET", 3.0),
            except_word=os.getenv("EXCEPT_WORD", "ยกเว้น"),
            use_code_word=os.getenv("USE_CODE_WORD", "ใช้รหัส"),
            name_markers=_get_list("NAME_MARKERS", ("ตำบล", "แขวง")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT),
        )


def _get_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{key} 값은 정수여야 합니다: {value!r}")


def _get_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{key} 값은 숫자여야 합니다: {value!r}")


def _get_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise ConfigError(f"{key} 값은 true/false 여야 합니다: {value!r}")


def _get_list(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    """쉼표로 구분된 값 목록 (빈 문자열이면 빈 튜플)"""
    value = os.getenv(key)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _load_env_file(env_file: str) -> None:
    """.env 파일 로드"""
    env_path = Path(env_file)
    if not env_path.exists():
        logger.warning(f".env 파일을 찾을 수 없습니다: {env_file}")
        return

    with open(env_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            # 주석 및 빈 줄 무시
            if not line or line.startswith('#'):
                continue

            # KEY=VALUE 파싱
            if '=' in line:
                key, value = line.split('=', 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                os.environ[key] = value


def load_config(env_file: Optional[str] = ".env") -> Config:
    """
    설정 로드

    Args:
        env_file: .env 파일 경로 (None이면 환경 변수만 사용)

    Returns:
        Config 객체
    """
    if env_file and Path(env_file).exists():
        logger.info(f"설정 파일 로드: {env_file}")
        return Config.from_env(env_file)
    else:
        logger.info("환경 변수에서 설정 로드")
        return Config.from_env(None)
