from pydantic import BaseModel, field_validator, model_validator

from shared.constants import (
    BACKGROUND_COLOR,
    BASE_ZOOM,
    HTTP_TIMEOUT_DEFAULT,
    MAX_CONCURRENT_REQUESTS,
    MAX_STREAM_ZOOM,
    REQUEST_SIZE,
    STATIC_MAPS_BASE,
    STATIC_MAPS_LANG,
    TARGET_ZOOM,
    TILE_SIZE,
    MapType,
    Resample,
    default_map_type,
)


class StreamSettings(BaseModel):
    """
    Параметры потоковой загрузки тайлов для глобуса.

    В эталонной конфигурации все значения постоянны (см. shared.constants),
    но могут быть переопределены профилем TOML.
    """

    model_config = {
        'extra': 'ignore',  # игнорировать лишние поля из профилей
    }

    # Стиль карты провайдера (l=map|sat)
    map_type: MapType = default_map_type()

    # Уровень, на котором грузятся итоговые тайлы
    target_zoom: int = TARGET_ZOOM
    # Грубая подложка, загружается первой
    base_zoom: int = BASE_ZOOM

    # Сторона тайла в буфере и сторона запрашиваемого изображения (px)
    tile_size: int = TILE_SIZE
    request_size: int = REQUEST_SIZE

    # Ограничение параллельных запросов при потоковой загрузке
    max_concurrency: int = MAX_CONCURRENT_REQUESTS

    lang: str = STATIC_MAPS_LANG
    base_url: str = STATIC_MAPS_BASE
    request_timeout_s: float = HTTP_TIMEOUT_DEFAULT

    # Фон буфера до прихода тайлов (RGB)
    background_color: tuple[int, int, int] = BACKGROUND_COLOR
    # Фильтр при масштабировании тайлов
    resample: Resample = Resample.BILINEAR

    @field_validator('target_zoom', 'base_zoom')
    @classmethod
    def validate_zoom(cls, v: int) -> int:
        if not (0 <= v <= MAX_STREAM_ZOOM):
            msg = f'Zoom must be in [0, {MAX_STREAM_ZOOM}], got {v}'
            raise ValueError(msg)
        return v

    @field_validator('tile_size', 'request_size', 'max_concurrency')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            msg = f'Value must be >= 1, got {v}'
            raise ValueError(msg)
        return v

    @field_validator('request_timeout_s')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            msg = f'Timeout must be positive, got {v}'
            raise ValueError(msg)
        return v

    @field_validator('background_color')
    @classmethod
    def validate_color(cls, v: tuple[int, int, int]) -> tuple[int, int, int]:
        if any(not (0 <= c <= 255) for c in v):
            msg = f'Color components must be in [0, 255], got {v}'
            raise ValueError(msg)
        return v

    @model_validator(mode='after')
    def validate_consistency(self) -> 'StreamSettings':
        if self.base_zoom > self.target_zoom:
            msg = (
                f'base_zoom ({self.base_zoom}) must not exceed '
                f'target_zoom ({self.target_zoom})'
            )
            raise ValueError(msg)
        if self.request_size < self.tile_size:
            msg = (
                f'request_size ({self.request_size}) must be >= '
                f'tile_size ({self.tile_size})'
            )
            raise ValueError(msg)
        return self

    @property
    def tiles_per_side(self) -> int:
        return 2**self.target_zoom

    @property
    def base_tiles_per_side(self) -> int:
        return 2**self.base_zoom

    @property
    def buffer_side_px(self) -> int:
        return self.tiles_per_side * self.tile_size

    @property
    def base_scale(self) -> int:
        # Во сколько раз тайл подложки крупнее целевого
        return 2 ** (self.target_zoom - self.base_zoom)

    @property
    def crop_offset(self) -> int:
        return (self.request_size - self.tile_size) // 2
