# === FILE: title_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации краулера TitleScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS: Dict[str, str] = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}


class CrawlConfig(BaseModel):
    """Конфигурация для одного запуска обхода."""
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    start_url: HttpUrl = Field(..., description="Стартовый URL обхода.")
    target_title: str = Field(..., min_length=1, description="Искомый заголовок страницы.")
    batch_size: int = Field(4, ge=1, description="Число страниц, обрабатываемых одновременно.")
    navigation_timeout_ms: int = Field(45_000, gt=0, description="Таймаут навигации (мс).")
    navigation_timeout_fatal: bool = Field(
        False, description="Считать таймаут навигации ошибкой страницы вместо извлечения."
    )

    spa_marker_class: str = Field("__next", min_length=1, description="Класс <html> у SPA-оболочки.")
    spa_timeout_ms: int = Field(10_000, gt=0, description="Ожидание исчезновения SPA-маркера (мс).")
    network_timeout_ms: int = Field(10_000, gt=0, description="Ожидание завершения fetch/XHR (мс).")
    settle_delay_ms: int = Field(2_000, ge=0, description="Фиксированная пауза перед извлечением (мс).")
    pending_timeout_ms: int = Field(5_000, gt=0, description="Повторное ожидание при незавершённых запросах (мс).")

    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    viewport_width: int = Field(1920, ge=1)
    viewport_height: int = Field(1080, ge=1)
    extra_headers: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    headless: bool = True
    ignore_https_errors: bool = True

    max_frontier: int = Field(100_000, ge=1, description="Лимит очереди непосещённых URL.")
    output_dir: Path = Field(Path("."), description="Каталог для JSON-артефакта.")
    flush_partial_on_abort: bool = Field(True, description="Сохранять найденное при аварийном завершении.")

    respect_robots: bool = Field(False, description="Учитывать robots.txt стартового хоста.")
    robots_timeout: float = Field(10.0, gt=0, description="Таймаут загрузки robots.txt (секунд).")

    @field_validator("target_title", mode="before")
    def _reject_blank_title(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            raise ValueError("target_title must not be blank")
        return v

    @property
    def seed(self) -> str:
        return str(self.start_url)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def _resolve(path: Union[str, Path, None]) -> Path:
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        return _DEFAULT_CFG
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))
    return path_obj


def read_config_file(path: Union[str, Path, None]) -> dict[str, Any]:
    """Читает YAML или JSON и возвращает «сырые» данные без валидации."""
    path_obj = _resolve(path)
    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None]) -> CrawlConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    return CrawlConfig(**read_config_file(path))


def build_config(
    path: Union[str, Path, None],
    overrides: Optional[Mapping[str, Any]] = None,
) -> CrawlConfig:
    """
    Собирает конфигурацию из файла (если он задан или есть configs/default.yaml)
    и переопределений из командной строки. Значения None игнорируются.
    """
    data: dict[str, Any] = {}
    if path is not None or _DEFAULT_CFG.exists():
        data = read_config_file(path)
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        # a camelCase key from the file would shadow the snake_case override
        data.pop(to_camel(key), None)
        data[key] = value
    return CrawlConfig(**data)


__all__ = ["CrawlConfig", "load_config", "build_config", "read_config_file", "DEFAULT_USER_AGENT"]
