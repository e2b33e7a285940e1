"""유틸리티 모듈"""
from .json_store import load_json, save_json
from .logging_config import setup_logging

__all__ = ["load_json", "save_json", "setup_logging"]
