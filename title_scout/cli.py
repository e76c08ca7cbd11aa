# === FILE: title_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска краулера TitleScout через командную строку.

Команды:
  crawl     Обойти сайт и сохранить страницы с искомым заголовком
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (по умолчанию configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --start-url URL             Стартовый URL (override start_url)
  --target-title TEXT         Искомый заголовок (override target_title)
  --batch-size INT            Размер пачки (override batch_size)
  --navigation-timeout-ms MS  Таймаут навигации (override navigation_timeout_ms)
  --output-dir DIR            Каталог для JSON-артефакта (override output_dir)
  --html PATH                 Дополнительно сохранить HTML-сводку
  --template DIR              Папка с Jinja2-шаблоном report.html.j2
  --scan-timeout SEC          Таймаут всего обхода (секунд)

Коды выхода: 0 — обход завершён (с совпадениями или без), 1 — аварийное завершение.

Пример:
  title-scout crawl --start-url https://example.com/ --target-title "Home"
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from title_scout import __version__
from title_scout.config import build_config
from title_scout.logger import DEFAULT_FORMAT, init_logging
from title_scout.report.html_report import render_html
from title_scout.report.json_report import write_results
from title_scout.scanner import start_scan

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

EXIT_FATAL = 1


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(EXIT_FATAL)


def _load(ctx, overrides=None):
    try:
        return build_config(ctx.obj['config_path'], overrides)
    except ValidationError as e:
        print_error(f'Ошибка в конфигурации:\n{e}')
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='TitleScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд TitleScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option('--start-url', '-u', 'start_url', default=None, help='Стартовый URL обхода')
@click.option('--target-title', '-t', 'target_title', default=None, help='Искомый заголовок страницы')
@click.option('--batch-size', '-b', 'batch_size', type=click.IntRange(min=1), default=None,
              help='Число страниц в пачке')
@click.option('--navigation-timeout-ms', 'navigation_timeout_ms', type=click.IntRange(min=1), default=None,
              help='Таймаут навигации (мс)')
@click.option(
    '--output-dir', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для JSON-артефакта'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-сводку в файл'
)
@click.option(
    '--template', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном (по умолчанию встроенный)'
)
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.pass_context
def crawl(ctx, start_url, target_title, batch_size, navigation_timeout_ms,
          output_dir, html_output, template_dir, scan_timeout):
    """Обойти сайт и сохранить страницы с искомым заголовком."""
    cfg = _load(ctx, {
        'start_url': start_url,
        'target_title': target_title,
        'batch_size': batch_size,
        'navigation_timeout_ms': navigation_timeout_ms,
        'output_dir': output_dir,
    })
    click.echo(f'Starting crawl: {cfg.seed} (title: {cfg.target_title!r})')
    try:
        report = asyncio.run(start_scan(cfg, scan_timeout=scan_timeout))
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    try:
        saved = write_results(report, cfg.output_dir, flush_partial=cfg.flush_partial_on_abort)
    except OSError as e:
        print_error(f'Ошибка при сохранении JSON: {e}')
    if saved:
        click.echo(f'JSON: {saved}')

    if html_output:
        try:
            saved_html = render_html(report, html_output, template_dir, target_title=cfg.target_title)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')

    summary = f'Visited: {report.visited}, matches: {len(report.matches)}, failed: {len(report.failed)}'
    if report.disallowed:
        summary += f', blocked by robots.txt: {len(report.disallowed)}'
    click.echo(summary)
    if not report.completed:
        print_error(f'Обход прерван: {report.error}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = _load(ctx)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
