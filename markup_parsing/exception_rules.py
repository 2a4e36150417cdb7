"""
비고란 예외 조항 파싱

패턴: "<except_word> <면 이름들> <use_code_word> NNNNN"
예) "ยกเว้นตำบลบางรักและตำบลสีลม ใช้รหัส 10500"
    → ExceptionRule(sub_district_names=['บางรัก', 'สีลม'], postal_code='10500')

정규식 수준의 좁은 추출기이다. 표현이 다른 비고는 매칭되지 않을 수 있다.
"""
import re
from typing import List, Tuple
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExceptionGrammar:
    """
    예외 조항 문법

    Attributes:
        except_word: 조항 시작 단어
        use_code_word: 대체 우편번호 앞 단어
        name_markers: 면 이름 앞 표지어 (ตำบล: 지방, แขวง: 방콕). 비어 있으면 구분자로 나눈다
        name_separators: 면 이름 사이 구분자
    """
    except_word: str = "ยกเว้น"
    use_code_word: str = "ใช้รหัส"
    name_markers: Tuple[str, ...] = ("ตำบล", "แขวง")
    name_separators: Tuple[str, ...] = (",", "และ")


THAI_GRAMMAR = ExceptionGrammar()


@dataclass
class ExceptionRule:
    sub_district_names: List[str] = field(default_factory=list)
    postal_code: str = ""


def _alternation(words: Tuple[str, ...]) -> str:
    return "|".join(re.escape(w) for w in words if w)


def _clause_pattern(grammar: ExceptionGrammar) -> re.Pattern:
    return re.compile(
        rf'{re.escape(grammar.except_word)}(.+?){re.escape(grammar.use_code_word)}\s*(\d{{5}})',
        re.DOTALL | re.IGNORECASE
    )


def _name_pattern(grammar: ExceptionGrammar) -> re.Pattern:
    markers = _alternation(grammar.name_markers)
    stops = [r'\s', r'[,()]', '$']
    if markers:
        stops.append(markers)
    separators = _alternation(grammar.name_separators)
    if separators:
        stops.append(separators)
    return re.compile(
        rf'(?:{markers})\s*([^\s,()]+?)(?={"|".join(stops)})',
        re.IGNORECASE
    )


def _extract_names(span: str, grammar: ExceptionGrammar) -> List[str]:
    if grammar.name_markers:
        return [m.group(1).strip() for m in _name_pattern(grammar).finditer(span)]

    separators = _alternation(grammar.name_separators)
    parts = re.split(separators, span) if separators else [span]
    return [p.strip() for p in parts if p.strip()]


def parse_exception_rules(notes: str, grammar: ExceptionGrammar = THAI_GRAMMAR) -> List[ExceptionRule]:
    """
    비고 문자열에서 예외 규칙 추출

    Args:
        notes: 비고 텍스트 (빈 문자열/None 허용)
        grammar: 예외 조항 문법

    Returns:
        ExceptionRule 리스트 (원문 순서, 이름을 못 찾은 조항은 제외)
    """
    if not notes:
        return []

    rules = []
    for match in _clause_pattern(grammar).finditer(notes):
        names = _extract_names(match.group(1).strip(), grammar)
        if names:
            rules.append(ExceptionRule(sub_district_names=names, postal_code=match.group(2)))
    return rules
