from enum import Enum

# Static Maps API (ll/z/l/size/lang query contract)
STATIC_MAPS_BASE = 'https://static-maps.yandex.ru/1.x/'

# Язык подписей на карте
STATIC_MAPS_LANG = 'en_US'

# Размер тайла в буфере (px)
TILE_SIZE = 256

# Размер запрашиваемого изображения (px); максимум высоты у провайдера 450.
# Водяной знак провайдера лежит в рамке вокруг центрального квадрата TILE_SIZE.
REQUEST_SIZE = 450

# Целевой уровень (8x8 тайлов, буфер 2048x2048)
TARGET_ZOOM = 3

# Грубая подложка (4x4 тайла), загружается первой
BASE_ZOOM = 2

# Максимальный уровень, который имеет смысл держать в одном буфере
MAX_STREAM_ZOOM = 10

# Максимальное число параллельных запросов при потоковой загрузке
MAX_CONCURRENT_REQUESTS = 4

# Таймаут одного HTTP-запроса (сек)
HTTP_TIMEOUT_DEFAULT = 10.0

# Цвет фона буфера до загрузки тайлов (#001e3f, океан)
BACKGROUND_COLOR = (0, 30, 63)

# Цвет сферы за пределами широт Меркатора (vec3(0.0, 0.05, 0.1))
OUTSIDE_MERCATOR_COLOR = (0, 13, 26)

# Предельная широта Web Mercator (градусы)
MAX_LATITUDE_DEG = 85.05112878

# Клэмп V при выборке из текстуры Меркатора
MERCATOR_V_EPSILON = 0.001

# Скорость вращения глобуса по умолчанию (рад/с)
ROTATION_SPEED_DEFAULT = 0.05

# Частота кадров для безголового режима
FRAME_RATE_DEFAULT = 30

PROFILES_DIR = 'configs/profiles'


class MapType(str, Enum):
    MAP = 'map'
    SAT = 'sat'


class Resample(str, Enum):
    NEAREST = 'nearest'
    BILINEAR = 'bilinear'


MAP_TYPE_LABELS: dict[MapType, str] = {
    MapType.MAP: 'Map',
    MapType.SAT: 'Satellite',
}


def default_map_type() -> MapType:
    return MapType.SAT
