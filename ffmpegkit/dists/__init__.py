"""
ffmpeg distributions: release providers and the install orchestrator.
"""

from .base import BaseProvider
from .evermeet import EvermeetProvider
from .gyan import GyanProvider
from .johnvansickle import JohnVanSickleProvider
from .providers import PROVIDERS, select_provider
from .resolver import resolve_release
from .installer import FFmpegInstaller, install

__all__ = [
    "BaseProvider",
    "EvermeetProvider",
    "GyanProvider",
    "JohnVanSickleProvider",
    "PROVIDERS",
    "select_provider",
    "resolve_release",
    "FFmpegInstaller",
    "install",
]
