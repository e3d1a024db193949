"""Shared constants."""
from shared.constants import (
    BACKGROUND_COLOR,
    MAX_CONCURRENT_REQUESTS,
    MapType,
    Resample,
)

__all__ = [
    'BACKGROUND_COLOR',
    'MAX_CONCURRENT_REQUESTS',
    'MapType',
    'Resample',
]
