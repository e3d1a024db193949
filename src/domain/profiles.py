"""Загрузка и сохранение профилей StreamSettings в TOML."""

from __future__ import annotations

import logging
from pathlib import Path

import tomlkit

from domain.models import StreamSettings
from shared.constants import PROFILES_DIR

logger = logging.getLogger(__name__)


def profile_path(name: str, base_dir: str | Path = PROFILES_DIR) -> Path:
    """Путь к файлу профиля по имени."""
    return Path(base_dir) / f'{name}.toml'


def list_profiles(base_dir: str | Path = PROFILES_DIR) -> list[str]:
    """Список имён профилей без расширения."""
    folder = Path(base_dir)
    if not folder.is_dir():
        return []
    return sorted(p.stem for p in folder.glob('*.toml') if p.is_file())


def load_profile(name_or_path: str, base_dir: str | Path = PROFILES_DIR) -> StreamSettings:
    """
    Загрузка и валидация профиля TOML -> StreamSettings.

    Поддерживает как имя профиля (без .toml) из каталога профилей,
    так и путь до TOML файла.
    """
    p = Path(name_or_path)
    path = p if p.suffix.lower() == '.toml' and p.exists() else profile_path(name_or_path, base_dir)
    if not path.exists():
        msg = f'Profile not found: {path}'
        raise FileNotFoundError(msg)
    data = tomlkit.parse(path.read_text(encoding='utf-8'))
    settings = StreamSettings.model_validate(data.unwrap())
    logger.info(
        'Profile %s loaded: map_type=%s target_zoom=%d base_zoom=%d',
        path.name,
        settings.map_type.value,
        settings.target_zoom,
        settings.base_zoom,
    )
    return settings


def save_profile(
    name: str, settings: StreamSettings, base_dir: str | Path = PROFILES_DIR
) -> Path:
    """Сохранение профиля в TOML (без атомарности и бэкапов)."""
    path = profile_path(name, base_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump(mode='json')
    path.write_text(tomlkit.dumps(data), encoding='utf-8')
    return path
