# title_scout/report/json_report.py

"""
Запись JSON-артефакта с найденными страницами.

Файл называется по времени старта обхода: ``pages-YYYY-MM-DD-HH-MM-SS.json``.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

from title_scout.crawler.models import CrawlReport, PageResult
from title_scout.logger import get_logger

logger = get_logger("report")


def artifact_name(started_at: datetime) -> str:
    """Имя файла с нулевым дополнением, чтобы файлы сортировались лексикографически."""
    return started_at.strftime("pages-%Y-%m-%d-%H-%M-%S.json")


def render_json(matches: Iterable[PageResult], output_path: Union[Path, str]) -> Path:
    """
    Сохраняет список {url, title} в формате JSON (отступ 2) по указанному пути.

    :param matches: найденные страницы в порядке обнаружения
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = [m.to_dict() for m in matches]

    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output


def write_results(
    report: CrawlReport,
    output_dir: Union[Path, str],
    *,
    flush_partial: bool = True,
) -> Optional[Path]:
    """
    Пишет артефакт, если есть хотя бы одно совпадение.

    Для прерванного обхода файл пишется только при ``flush_partial``.
    Возвращает путь к файлу или None, если ничего не записано.
    """
    if not report.matches:
        logger.info("Совпадений нет, файл не создаётся")
        return None
    if not report.completed and not flush_partial:
        logger.warning("Обход прерван, %d найденных страниц не сохранены", len(report.matches))
        return None
    path = render_json(report.matches, Path(output_dir) / artifact_name(report.started_at))
    logger.info("✅ Сохранено: %s", path)
    return path
