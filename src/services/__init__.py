"""Services layer."""
from services.stream_manager import TileStreamManager

__all__ = ['TileStreamManager']
