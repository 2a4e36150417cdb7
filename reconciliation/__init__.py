"""우편번호 병합 모듈"""

from .diagnostics import DiagnosticSink, Diagnostic
from .reconciler import Reconciler, generate_zip_codes, process_reconciliation

__all__ = [
    'DiagnosticSink',
    'Diagnostic',
    'Reconciler',
    'generate_zip_codes',
    'process_reconciliation'
]
