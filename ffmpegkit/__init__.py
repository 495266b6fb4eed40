"""
ffmpegkit: install ffmpeg builds from per-platform release sources into a
tool cache.
"""

from ffmpegkit.core.models import InstallOptions, InstallResult
from ffmpegkit.dists.installer import FFmpegInstaller, install

__all__ = ["InstallOptions", "InstallResult", "FFmpegInstaller", "install"]
