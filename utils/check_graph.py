"""
우편번호 그래프 JSON 확인 스크립트

사용법: python utils/check_graph.py [output/postcodes.json] [주 코드]
"""
import json
from pathlib import Path
from typing import Dict, List, Optional
import sys


def find_province(data: Dict, code: Optional[str] = None, name: Optional[str] = None) -> Optional[Dict]:
    """
    주 찾기

    Args:
        data: 내보낸 그래프 JSON
        code: 주 키 (예: "10")
        name: 태국어/영문 이름 일부

    Returns:
        주 딕셔너리 (없으면 None)
    """
    for province in data.get('provinces', []):
        if code and province.get('code') == code:
            return province
        title = province.get('title', {})
        if name and (name in title.get('th', '') or name.lower() in title.get('en', '').lower()):
            return province
    return None


def print_province(province: Dict, max_sub_districts: int = 5):
    """주 → 군 → 면 트리 출력"""
    title = province.get('title', {})
    print(f"├── [주] {province.get('code')} {title.get('th', '')} ({title.get('en', '')})")
    for district in province.get('districts', []):
        d_title = district.get('title', {})
        print(f"│   ├── [군] {district.get('code')} {d_title.get('th', '')}")
        sub_districts = district.get('subDistricts', [])
        for sub_district in sub_districts[:max_sub_districts]:
            s_title = sub_district.get('title', {})
            zips = ", ".join(sub_district.get('zipCodes', [])) or "(우편번호 없음)"
            print(f"│   │   ├── [면] {sub_district.get('code')} {s_title.get('th', '')} → {zips}")
        if len(sub_districts) > max_sub_districts:
            print(f"│   │   └── ... 외 {len(sub_districts) - max_sub_districts}개 더")


def analyze_graph(data: Dict) -> Dict[str, int]:
    """
    그래프 통계

    Returns:
        통계 딕셔너리
    """
    stats = {
        '주': 0,
        '군': 0,
        '면': 0,
        '우편번호': len(data.get('zipCodes', [])),
        '우편번호 없는 면': 0,
        '우편번호 여러 개인 면': 0
    }

    for province in data.get('provinces', []):
        stats['주'] += 1
        for district in province.get('districts', []):
            stats['군'] += 1
            for sub_district in district.get('subDistricts', []):
                stats['면'] += 1
                zip_count = len(sub_district.get('zipCodes', []))
                if zip_count == 0:
                    stats['우편번호 없는 면'] += 1
                elif zip_count > 1:
                    stats['우편번호 여러 개인 면'] += 1

    return stats


def check_graph_structure(data: Dict) -> List[str]:
    """
    그래프 일관성 체크

    - 군/면 키가 부모 키를 접두어로 가지는지
    - zipCodes 목록과 면의 zipCodes가 서로 맞는지

    Returns:
        문제점 리스트
    """
    issues = []
    sub_district_zips: Dict[str, set] = {}

    for province in data.get('provinces', []):
        p_code = province.get('code', '')
        for district in province.get('districts', []):
            d_code = district.get('code', '')
            if not d_code.startswith(f"{p_code}-"):
                issues.append(f"군 키가 주 키로 시작하지 않음: {d_code} (주 {p_code})")
            for sub_district in district.get('subDistricts', []):
                s_code = sub_district.get('code', '')
                if not s_code.startswith(f"{d_code}-"):
                    issues.append(f"면 키가 군 키로 시작하지 않음: {s_code} (군 {d_code})")
                sub_district_zips[s_code] = set(sub_district.get('zipCodes', []))

    for zip_code in data.get('zipCodes', []):
        code = zip_code.get('code')
        for s_code in zip_code.get('subDistricts', []):
            if s_code not in sub_district_zips:
                issues.append(f"우편번호 {code}의 면을 찾을 수 없음: {s_code}")
            elif code not in sub_district_zips[s_code]:
                issues.append(f"면 {s_code}에 우편번호 {code} 연결 누락")

    return issues


def main():
    if len(sys.argv) > 1:
        input_file = Path(sys.argv[1])
    else:
        input_file = Path(__file__).parent.parent / "output" / "postcodes.json"
    province_code = sys.argv[2] if len(sys.argv) > 2 else None

    if not input_file.exists():
        print(f"❌ 파일을 찾을 수 없습니다: {input_file}")
        print(f"\n사용법: python {Path(__file__).name} [파일경로] [주 코드]")
        print(f"예시: python {Path(__file__).name} output/postcodes.json 10")
        return

    print("=" * 80)
    print("우편번호 그래프 확인")
    print("=" * 80)
    print(f"입력: {input_file}")

    print("\n[1/4] JSON 파일 로드 중...")
    with open(input_file, 'r', encoding='utf-8') as f:
        data = json.load(f)
    print("  → 로드 완료")

    print("\n[2/4] 구조 통계")
    print("-" * 80)
    for key, value in analyze_graph(data).items():
        print(f"  {key}: {value}개")
    diagnostics = data.get('diagnostics', {})
    if diagnostics:
        print(f"  진단: {diagnostics}")

    print("\n[3/4] 주 트리")
    print("-" * 80)
    province = find_province(data, code=province_code)
    if province_code and not province:
        print(f"  ❌ 주 {province_code}를 찾을 수 없습니다.")
    elif province:
        print_province(province)
    else:
        provinces = data.get('provinces', [])
        for p in provinces[:3]:
            print_province(p, max_sub_districts=2)
        if len(provinces) > 3:
            print(f"  ... 외 {len(provinces) - 3}개 주 더")

    print("\n[4/4] 구조 검증")
    print("-" * 80)
    issues = check_graph_structure(data)
    if issues:
        print(f"  ⚠️  {len(issues)}개 문제 발견:")
        for issue in issues[:10]:
            print(f"    - {issue}")
        if len(issues) > 10:
            print(f"    ... 외 {len(issues) - 10}개 더")
    else:
        print("  ✓ 구조 검증 통과")

    print("\n" + "=" * 80)
    print("완료!")
    print("=" * 80)


if __name__ == "__main__":
    main()
