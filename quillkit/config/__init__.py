"""Configuration for quillkit."""
from .settings import Settings, get_settings
from . import constants

__all__ = ['Settings', 'get_settings', 'constants']
