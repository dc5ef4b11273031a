"""誤差解析パッケージ"""

from .analyzer import ERROR_FLOOR, ErrorAnalyzer
from .report import generate_report
from .results import EXPECTED_ORDER, ConvergenceStudy, ErrorAnalysis, MethodComparison

__all__ = [
    "ERROR_FLOOR",
    "EXPECTED_ORDER",
    "ErrorAnalyzer",
    "ErrorAnalysis",
    "ConvergenceStudy",
    "MethodComparison",
    "generate_report",
]
