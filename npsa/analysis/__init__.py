"""Analysis helpers."""

from .compare import build_compare_report, compare_report_to_rows
from .crosscheck import cross_check_modes

__all__ = ["build_compare_report", "compare_report_to_rows", "cross_check_modes"]
