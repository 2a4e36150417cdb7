"""
행정 구역 엑셀(tumbon.xlsx) 파싱

엑셀 첫 번째 시트의 행을 읽어 주/군/면 Raw 레코드 맵 3개를 만든다.
- 행 순서 그대로 처리 (재정렬하지 않음)
- 키 충돌 시 먼저 나온 레코드 유지, 면 키 중복은 진단으로 보고
- 필수 필드 파싱 실패 행이 하나라도 있으면 전체 임포트 실패
"""
import logging
from pathlib import Path
from typing import List, Dict, Iterable, Optional, Any
from dataclasses import dataclass

import pandas as pd

from exceptions import MissingSourceError, SourceFormatError
from hierarchy_parsing.key_scheme import KeyScheme, DEFAULT_KEY_SCHEME
from hierarchy_parsing.models import (
    BilingualTitle,
    RawProvince,
    RawDistrict,
    RawSubDistrict,
    RawHierarchy,
)
from reconciliation.diagnostics import DiagnosticSink, DUPLICATE_KEY

logger = logging.getLogger(__name__)

# 엑셀 컬럼명
COL_PROVINCE_ID = "CH_ID"
COL_PROVINCE_TH = "CHANGWAT_T"
COL_PROVINCE_EN = "CHANGWAT_E"
COL_DISTRICT_ID = "AM_ID"
COL_DISTRICT_EN = "AMPHOE_E"
COL_SUB_DISTRICT_ID = "TA_ID"
COL_SUB_DISTRICT_TH = "TAMBON_T"
COL_SUB_DISTRICT_EN = "TAMBON_E"
COL_LAT = "LAT"
COL_LONG = "LONG"
COL_AD_LEVEL = "AD_LEVEL"

REQUIRED_COLUMNS = [
    COL_PROVINCE_ID, COL_PROVINCE_TH, COL_PROVINCE_EN,
    COL_DISTRICT_ID, COL_DISTRICT_EN,
    COL_SUB_DISTRICT_ID, COL_SUB_DISTRICT_TH, COL_SUB_DISTRICT_EN,
    COL_LAT, COL_LONG,
]

DUPLICATE_SAMPLE_SIZE = 10


@dataclass
class TumbonRow:
    province_id: str
    province_th: str
    province_en: str
    district_id: str
    district_en: str
    sub_district_id: str
    sub_district_th: str
    sub_district_en: str
    lat: float
    long: float
    ad_level: Optional[int] = None


# =============================================================================
# 행 파싱
# =============================================================================

def _normalize_id(value: Any, column: str, row_number: int) -> str:
    """숫자 ID 정규화 ('10', '10.0', 10 → '10')"""
    text = str(value).strip() if value is not None else ""
    if not text:
        raise SourceFormatError(f"{row_number}행: {column} 값이 비어 있습니다")
    try:
        number = float(text)
    except ValueError:
        raise SourceFormatError(f"{row_number}행: {column} 값이 숫자가 아닙니다: {text!r}")
    if not number.is_integer():
        raise SourceFormatError(f"{row_number}행: {column} 값이 정수가 아닙니다: {text!r}")
    return str(int(number))


def _parse_float(value: Any, column: str, row_number: int) -> float:
    text = str(value).strip() if value is not None else ""
    try:
        return float(text)
    except ValueError:
        raise SourceFormatError(f"{row_number}행: {column} 값이 숫자가 아닙니다: {text!r}")


def _parse_text(value: Any, column: str, row_number: int) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise SourceFormatError(f"{row_number}행: {column} 값이 비어 있습니다")
    return text


def parse_row(raw: Dict[str, Any], row_number: int) -> TumbonRow:
    """
    엑셀 한 행을 TumbonRow로 변환

    Args:
        raw: 컬럼명 → 셀 값
        row_number: 오류 메시지용 행 번호 (헤더 다음 행이 2)

    Returns:
        TumbonRow
    """
    ad_level_raw = raw.get(COL_AD_LEVEL, "")
    ad_level = None
    if ad_level_raw is not None and str(ad_level_raw).strip():
        ad_level = int(_normalize_id(ad_level_raw, COL_AD_LEVEL, row_number))

    return TumbonRow(
        province_id=_normalize_id(raw.get(COL_PROVINCE_ID), COL_PROVINCE_ID, row_number),
        province_th=_parse_text(raw.get(COL_PROVINCE_TH), COL_PROVINCE_TH, row_number),
        province_en=_parse_text(raw.get(COL_PROVINCE_EN), COL_PROVINCE_EN, row_number),
        district_id=_normalize_id(raw.get(COL_DISTRICT_ID), COL_DISTRICT_ID, row_number),
        district_en=_parse_text(raw.get(COL_DISTRICT_EN), COL_DISTRICT_EN, row_number),
        sub_district_id=_normalize_id(raw.get(COL_SUB_DISTRICT_ID), COL_SUB_DISTRICT_ID, row_number),
        sub_district_th=_parse_text(raw.get(COL_SUB_DISTRICT_TH), COL_SUB_DISTRICT_TH, row_number),
        sub_district_en=_parse_text(raw.get(COL_SUB_DISTRICT_EN), COL_SUB_DISTRICT_EN, row_number),
        lat=_parse_float(raw.get(COL_LAT), COL_LAT, row_number),
        long=_parse_float(raw.get(COL_LONG), COL_LONG, row_number),
        ad_level=ad_level,
    )


def read_tumbon_rows(xlsx_path: Path) -> List[TumbonRow]:
    """
    엑셀 첫 번째 시트의 모든 행 읽기

    Args:
        xlsx_path: tumbon.xlsx 경로

    Returns:
        TumbonRow 리스트 (시트 행 순서)
    """
    xlsx_path = Path(xlsx_path)
    if not xlsx_path.exists():
        raise MissingSourceError(f"행정 구역 파일을 찾을 수 없습니다: {xlsx_path}")

    try:
        with pd.ExcelFile(xlsx_path, engine="openpyxl") as workbook:
            if not workbook.sheet_names:
                raise MissingSourceError(f"엑셀 파일에 워크시트가 없습니다: {xlsx_path}")
            sheet_name = workbook.sheet_names[0]
            df = workbook.parse(sheet_name, dtype=str, keep_default_na=False)
    except MissingSourceError:
        raise
    except Exception as e:
        raise MissingSourceError(f"엑셀 파일을 읽을 수 없습니다: {xlsx_path}", details=str(e))

    df.columns = [str(c).strip().upper() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise SourceFormatError(f"필수 컬럼이 없습니다: {', '.join(missing)}")

    logger.info(f"워크시트 '{sheet_name}': {len(df)}행")

    rows = []
    for idx, record in enumerate(df.to_dict(orient="records"), start=2):
        rows.append(parse_row(record, idx))
    return rows


# =============================================================================
# 계층 맵 생성
# =============================================================================

def build_hierarchy(
    rows: Iterable[TumbonRow],
    key_scheme: KeyScheme = DEFAULT_KEY_SCHEME,
    diagnostics: Optional[DiagnosticSink] = None
) -> RawHierarchy:
    """
    행 목록을 주/군/면 Raw 레코드 맵으로 변환

    레코드의 code는 생성된 합성 키로 덮어쓴다.
    이후 단계는 원래 자연 ID를 사용하지 않는다.

    Args:
        rows: TumbonRow 목록
        key_scheme: 키 생성 전략
        diagnostics: 중복 키 보고용 진단 수집기

    Returns:
        RawHierarchy
    """
    hierarchy = RawHierarchy()
    duplicates: Dict[str, None] = {}
    row_count = 0

    for row in rows:
        row_count += 1

        province = RawProvince(
            code=row.province_id,
            title=BilingualTitle(th=row.province_th, en=row.province_en)
        )
        province_key = key_scheme.province(row.province_id, province)
        province.code = province_key
        if province_key not in hierarchy.provinces:
            hierarchy.provinces[province_key] = province

        # 군은 태국어 이름이 없어서 영문 이름을 양쪽에 사용
        district = RawDistrict(
            code=row.district_id,
            title=BilingualTitle(th=row.district_en, en=row.district_en)
        )
        district_key = key_scheme.district(row.province_id, row.district_id, district)
        district.code = district_key
        if district_key not in hierarchy.districts:
            hierarchy.districts[district_key] = district

        sub_district = RawSubDistrict(
            code=row.sub_district_id,
            title=BilingualTitle(th=row.sub_district_th, en=row.sub_district_en)
        )
        sub_district_key = key_scheme.sub_district(
            row.province_id, row.district_id, row.sub_district_id, sub_district
        )
        sub_district.code = sub_district_key
        if sub_district_key not in hierarchy.sub_districts:
            hierarchy.sub_districts[sub_district_key] = sub_district
        else:
            duplicates[sub_district_key] = None

    if row_count == 0:
        raise MissingSourceError("행정 구역 데이터에 사용할 수 있는 행이 없습니다")

    hierarchy.duplicate_keys = list(duplicates)
    if hierarchy.duplicate_keys:
        sample = hierarchy.duplicate_keys[:DUPLICATE_SAMPLE_SIZE]
        suffix = "..." if len(hierarchy.duplicate_keys) > DUPLICATE_SAMPLE_SIZE else ""
        message = (
            f"중복 면 키 {len(hierarchy.duplicate_keys)}개: {', '.join(sample)}{suffix}"
        )
        if diagnostics is not None:
            diagnostics.record(
                DUPLICATE_KEY, message,
                keys=list(hierarchy.duplicate_keys), sample=sample
            )
        else:
            logger.warning(message)

    return hierarchy


def parse_tumbon_file(
    xlsx_path: Path,
    key_scheme: KeyScheme = DEFAULT_KEY_SCHEME,
    diagnostics: Optional[DiagnosticSink] = None
) -> RawHierarchy:
    """엑셀 파일 → RawHierarchy"""
    rows = read_tumbon_rows(xlsx_path)
    hierarchy = build_hierarchy(rows, key_scheme, diagnostics)

    logger.info(f"  주: {len(hierarchy.provinces)}개")
    logger.info(f"  군: {len(hierarchy.districts)}개")
    logger.info(f"  면: {len(hierarchy.sub_districts)}개")
    return hierarchy
