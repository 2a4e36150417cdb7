"""그래프 내보내기 모듈"""

from .graph_exporter import GraphExporter, process_graph_export

__all__ = ['GraphExporter', 'process_graph_export']
