"""
비치명 진단 이벤트 수집기

중복 키, 매칭 실패 행, 예외 조항의 미확인 면 이름을 기록한다.
테스트에서는 로그 문자열 대신 이 객체를 검사한다.
"""
import logging
from typing import List, Dict, Any
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DUPLICATE_KEY = "duplicate_key"
UNMATCHED_UNIT = "unmatched_unit"
UNMATCHED_EXCEPTION_NAME = "unmatched_exception_name"

DIAGNOSTIC_KINDS = (DUPLICATE_KEY, UNMATCHED_UNIT, UNMATCHED_EXCEPTION_NAME)


@dataclass
class Diagnostic:
    kind: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {'kind': self.kind, 'message': self.message, 'context': self.context}


class DiagnosticSink:
    """진단 이벤트 저장소"""

    def __init__(self):
        self.events: List[Diagnostic] = []

    def record(self, kind: str, message: str, **context: Any) -> Diagnostic:
        event = Diagnostic(kind=kind, message=message, context=context)
        self.events.append(event)
        logger.warning(message)
        return event

    def of_kind(self, kind: str) -> List[Diagnostic]:
        return [e for e in self.events if e.kind == kind]

    def count(self, kind: str) -> int:
        return len(self.of_kind(kind))

    def summary(self) -> Dict[str, int]:
        """종류별 건수 (duplicate_key는 이벤트 1건에 담긴 중복 키 수)"""
        duplicates = sum(len(e.context.get('keys', [])) for e in self.of_kind(DUPLICATE_KEY))
        return {
            'duplicateSubDistricts': duplicates,
            'unmatchedTuples': self.count(UNMATCHED_UNIT),
            'unmatchedExceptionNames': self.count(UNMATCHED_EXCEPTION_NAME),
        }

    def __len__(self) -> int:
        return len(self.events)
