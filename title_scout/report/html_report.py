# File: title_scout/report/html_report.py
"""title_scout.report.html_report: HTML-сводка обхода с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from title_scout.crawler.models import CrawlReport

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_NAME = "report.html.j2"


def render_html(
    report: CrawlReport,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
    *,
    target_title: str = "",
) -> Path:
    """Рендерит HTML-сводку из шаблона и сохраняет её по указанному пути.

    Args:
        report: объект CrawlReport.
        output_path: путь к итоговому HTML-файлу.
        template_dir: директория с шаблоном ``report.html.j2``;
            по умолчанию шаблон из пакета.
        target_title: искомый заголовок, выводится в шапке.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir is not None else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "target_title": target_title,
        "started_at": report.started_at,
        "matches": report.matches,
        "visited": report.visited,
        "batches": report.batches,
        "failed": report.failed,
        "disallowed": report.disallowed,
        "error": report.error,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
