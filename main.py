"""우편번호 데이터 컴파일 파이프라인"""
from pathlib import Path
from typing import List, Optional
import argparse
import logging
import sys
import time
from datetime import timedelta

from config import Config, load_config, POSTCODE_SOURCE_PDF, POSTCODE_SOURCE_WIKI
from exceptions import PipelineError, MissingSourceError
from hierarchy_parsing import parse_tumbon_file, bind_hierarchy, DEFAULT_KEY_SCHEME
from layout_parsing import LayoutConfig, parse_postcode_pdf
from markup_parsing import ExceptionGrammar, process_wiki_postcodes
from reconciliation import DiagnosticSink, process_reconciliation
from export import process_graph_export

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def setup_logging(config: Config) -> None:
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format=config.log_format,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def build_layout_config(config: Config) -> LayoutConfig:
    return LayoutConfig(
        column_count=config.layout_column_count,
        indent_offset_x=config.layout_indent_offset_x,
        bounding_max_y=config.layout_bounding_max_y,
        province_font=config.layout_province_font,
        district_tolerance=config.layout_district_tolerance,
        y_bucket=config.layout_y_bucket
    )


def build_exception_grammar(config: Config) -> ExceptionGrammar:
    return ExceptionGrammar(
        except_word=config.except_word,
        use_code_word=config.use_code_word,
        name_markers=config.name_markers
    )


def _elapsed(start: float) -> str:
    elapsed = time.time() - start
    return f"{timedelta(seconds=int(elapsed))} ({elapsed:.2f}초)"


def run_compile(config: Config) -> Path:
    """
    전체 파이프라인 실행:
    1. 행정 구역 파싱 (tumbon.xlsx → 주/군/면 맵)
    2. 그래프 연결 (주 ↔ 군 ↔ 면)
    3. 우편번호 추출 (위키 HTML 또는 PDF)
    4. 병합 (우편번호 → 면)
    5. JSON 내보내기

    Returns:
        출력 JSON 경로
    """
    tumbon_path = config.tumbon_path
    if not tumbon_path.exists():
        raise MissingSourceError(f"입력 파일을 찾을 수 없습니다: {tumbon_path}")

    diagnostics = DiagnosticSink()
    total_start_time = time.time()

    logger.info("=" * 80)
    logger.info("우편번호 컴파일 시작")
    logger.info("=" * 80)

    # ============================================================
    # 1. 행정 구역 파싱
    # ============================================================
    logger.info("\n" + "=" * 80)
    logger.info(f"1단계: 행정 구역 파싱 ({tumbon_path.name})")
    logger.info("=" * 80)

    step_start = time.time()
    raw = parse_tumbon_file(tumbon_path, DEFAULT_KEY_SCHEME, diagnostics)
    logger.info(f"✅ 행정 구역 파싱 완료  ⏱️  {_elapsed(step_start)}")

    # ============================================================
    # 2. 그래프 연결
    # ============================================================
    logger.info("\n" + "=" * 80)
    logger.info("2단계: 그래프 연결 (주 ↔ 군 ↔ 면)")
    logger.info("=" * 80)

    step_start = time.time()
    bound = bind_hierarchy(raw, DEFAULT_KEY_SCHEME)
    logger.info(f"✅ 그래프 연결 완료  ⏱️  {_elapsed(step_start)}")

    # ============================================================
    # 3. 우편번호 추출
    # ============================================================
    logger.info("\n" + "=" * 80)
    logger.info(f"3단계: 우편번호 추출 ({config.postcode_source})")
    logger.info("=" * 80)

    step_start = time.time()
    if config.postcode_source == POSTCODE_SOURCE_PDF:
        rows = parse_postcode_pdf(config.postcode_pdf_path, build_layout_config(config))
    else:
        rows = process_wiki_postcodes(
            bound.provinces.values(),
            url=config.wiki_url,
            cache_dir=Path(config.cache_dir),
            cache_prefix=config.cache_prefix,
            ttl_days=config.cache_ttl_days,
            timeout=config.fetch_timeout
        )
    logger.info(f"✅ 우편번호 추출 완료: {len(rows)}건  ⏱️  {_elapsed(step_start)}")

    # ============================================================
    # 4. 병합
    # ============================================================
    logger.info("\n" + "=" * 80)
    logger.info(f"4단계: 병합 (merge_dedup={config.merge_dedup})")
    logger.info("=" * 80)

    step_start = time.time()
    zip_codes = process_reconciliation(
        bound, rows,
        grammar=build_exception_grammar(config),
        merge_dedup=config.merge_dedup,
        diagnostics=diagnostics
    )
    logger.info(f"✅ 병합 완료: 우편번호 {len(zip_codes)}개  ⏱️  {_elapsed(step_start)}")

    # ============================================================
    # 5. 내보내기
    # ============================================================
    logger.info("\n" + "=" * 80)
    logger.info("5단계: JSON 내보내기")
    logger.info("=" * 80)

    step_start = time.time()
    output_file = process_graph_export(bound, config.output_graph_path, diagnostics)
    logger.info(f"✅ 내보내기 완료  ⏱️  {_elapsed(step_start)}")

    # ============================================================
    # 완료
    # ============================================================
    logger.info("\n" + "=" * 80)
    logger.info("우편번호 컴파일 완료!")
    logger.info("=" * 80)
    logger.info(f"  총 소요 시간: {_elapsed(total_start_time)}")
    for key, value in diagnostics.summary().items():
        logger.info(f"  {key}: {value}")
    logger.info(f"  결과 위치: {output_file}")
    logger.info("=" * 80)

    return output_file


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="main.py",
        description="태국 행정 구역 + 우편번호 데이터 컴파일"
    )
    parser.add_argument("-v", "--version", action="version", version=f"thai-postcode-compiler {__version__}")
    parser.add_argument("command", nargs="?", choices=["compile", "help"], help="compile: 데이터 컴파일, help: 도움말")
    parser.add_argument(
        "--source",
        choices=[POSTCODE_SOURCE_WIKI, POSTCODE_SOURCE_PDF],
        default=None,
        help="우편번호 원본 (기본값: POSTCODE_SOURCE 환경 변수)"
    )
    parser.add_argument("--env-file", default=".env", help=".env 파일 경로")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.command in (None, "help"):
        parser.print_help()
        return 0

    try:
        config = load_config(args.env_file)
    except Exception as e:
        # 기본 로깅 설정 (config 로드 전)
        logging.basicConfig(
            level=logging.ERROR,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[logging.StreamHandler(sys.stdout)]
        )
        logger.error(f"설정 로드 실패: {e}")
        return 1

    if args.source:
        config.postcode_source = args.source
    setup_logging(config)

    try:
        run_compile(config)
    except PipelineError as e:
        logger.error(f"파이프라인 중단: {e}")
        return 1
    except Exception as e:
        logger.error(f"예상치 못한 오류: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
