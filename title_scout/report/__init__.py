# File: title_scout/report/__init__.py
"""title_scout.report: JSON-артефакт и HTML-сводка, используемые CLI и тестами."""

from title_scout.report.html_report import render_html
from title_scout.report.json_report import artifact_name, render_json, write_results

__all__ = ["render_json", "render_html", "write_results", "artifact_name"]
