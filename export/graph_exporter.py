"""
병합된 행정 구역 그래프 JSON 내보내기

출력: output/postcodes.json
  - provinces: 주 → 군 → 면 트리 (면은 우편번호 코드 목록만 가짐)
  - zipCodes: 우편번호 → 면 키 목록
  - diagnostics: 비치명 진단 건수
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from exceptions import ExportError
from hierarchy_parsing.models import (
    BoundHierarchy,
    BoundProvince,
    BoundDistrict,
    BoundSubDistrict,
    BoundZipCode,
)
from reconciliation.diagnostics import DiagnosticSink

logger = logging.getLogger(__name__)


class GraphExporter:
    """연결 그래프 → JSON"""

    def __init__(self, bound: BoundHierarchy, diagnostics: Optional[DiagnosticSink] = None):
        self.bound = bound
        self.diagnostics = diagnostics

    def to_dict(self) -> Dict:
        return {
            'provinces': [self._province(p) for p in self.bound.provinces.values()],
            'zipCodes': [self._zip_code(z) for z in self._sorted_zip_codes()],
            'diagnostics': self.diagnostics.summary() if self.diagnostics is not None else {},
        }

    def _province(self, province: BoundProvince) -> Dict:
        return {
            'code': province.code,
            'title': province.title.to_dict(),
            'districts': [self._district(d) for d in province.districts],
        }

    def _district(self, district: BoundDistrict) -> Dict:
        return {
            'code': district.code,
            'title': district.title.to_dict(),
            'subDistricts': [self._sub_district(s) for s in district.sub_districts],
        }

    def _sub_district(self, sub_district: BoundSubDistrict) -> Dict:
        return {
            'code': sub_district.code,
            'title': sub_district.title.to_dict(),
            'zipCodes': [z.code for z in sub_district.zip_codes],
        }

    def _zip_code(self, zip_code: BoundZipCode) -> Dict:
        return {
            'code': zip_code.code,
            'subDistricts': zip_code.sub_district_codes(),
        }

    def _sorted_zip_codes(self) -> List[BoundZipCode]:
        return [self.bound.zip_codes[code] for code in sorted(self.bound.zip_codes)]

    def save(self, output_path: Path) -> Path:
        output_file = Path(output_path)
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise ExportError(f"그래프 저장 실패: {output_file}", details=str(e))

        logger.info(f"그래프 저장: {output_file}")
        return output_file


def process_graph_export(
    bound: BoundHierarchy,
    output_path: Path,
    diagnostics: Optional[DiagnosticSink] = None
) -> Path:
    """
    그래프를 JSON 파일로 저장

    Args:
        bound: 병합이 끝난 그래프
        output_path: 출력 JSON 경로
        diagnostics: 진단 수집기 (요약이 파일에 포함됨)

    Returns:
        저장된 파일 경로
    """
    exporter = GraphExporter(bound, diagnostics)
    return exporter.save(output_path)
