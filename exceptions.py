"""커스텀 예외 클래스"""
from typing import Optional


class PipelineError(Exception):
    """파이프라인 기본 예외"""
    def __init__(self, message: str, step: Optional[str] = None):
        self.message = message
        self.step = step
        super().__init__(self.message)

    def __str__(self):
        if self.step:
            return f"[{self.step}] {self.message}"
        return self.message


class MissingSourceError(PipelineError):
    """원본 파일/워크시트 없음"""
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message, step="원본 로드")
        self.details = details


class SourceFormatError(PipelineError):
    """원본 데이터 형식 오류 (필수 컬럼 누락, 파싱 불가 행, 빈 스크랩 결과)"""
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message, step="원본 파싱")
        self.details = details


class ProvinceValidationError(PipelineError):
    """스크랩한 주(province) 제목이 기준 계층과 매칭되지 않음"""
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message, step="주 검증")
        self.details = details


class FetchError(PipelineError):
    """원격 문서 요청 실패"""
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message, step="문서 요청")
        self.details = details


class HierarchyBindingError(PipelineError):
    """계층 그래프 연결 에러 (부모 키를 찾을 수 없음)"""
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message, step="계층 연결")
        self.details = details


class ExportError(PipelineError):
    """그래프 내보내기 에러"""
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message, step="내보내기")
        self.details = details


class ConfigError(PipelineError):
    """설정 에러"""
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message, step="설정")
        self.details = details
