"""Проекционные преобразования для выборки текстуры Меркатора на сфере."""

from __future__ import annotations

import math

from shared.constants import MAX_LATITUDE_DEG, MERCATOR_V_EPSILON

MAX_LATITUDE_RAD = math.radians(MAX_LATITUDE_DEG)


def latitude_to_mercator_v(lat_rad: float) -> float:
    """
    Широта (рад) -> координата V текстуры Меркатора.

    V=1 соответствует северному краю, V=0.5 экватору.
    """
    y = math.log(math.tan(math.pi / 4 + lat_rad / 2))
    return 0.5 + 0.5 * (y / math.pi)


def clamp_mercator_v(v: float) -> float:
    """Клэмп V, чтобы не цеплять противоположный край при выборке."""
    return min(max(v, MERCATOR_V_EPSILON), 1.0 - MERCATOR_V_EPSILON)


def is_within_mercator(lat_rad: float) -> bool:
    return -MAX_LATITUDE_RAD <= lat_rad <= MAX_LATITUDE_RAD


def rotation_to_longitude(rotation_rad: float) -> float:
    """
    Угол поворота сферы вокруг оси Y -> долгота, обращённая к камере.

    Вращение в положительную сторону уводит восток от камеры, поэтому знак
    меняется.
    """
    rad = math.fmod(rotation_rad, 2 * math.pi)
    return -math.degrees(rad)
