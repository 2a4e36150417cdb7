"""설정 모듈"""

from .config_loader import Config, load_config, POSTCODE_SOURCE_WIKI, POSTCODE_SOURCE_PDF

__all__ = [
    'Config',
    'load_config',
    'POSTCODE_SOURCE_WIKI',
    'POSTCODE_SOURCE_PDF'
]
