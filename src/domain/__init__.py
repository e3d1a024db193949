"""Domain layer - settings model and profiles."""
from domain.models import StreamSettings
from domain.profiles import (
    list_profiles,
    load_profile,
    save_profile,
)

__all__ = [
    'StreamSettings',
    'list_profiles',
    'load_profile',
    'save_profile',
]
