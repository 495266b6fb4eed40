"""
Entry point for running the ffmpegkit CLI as a module.

Usage: python -m ffmpegkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
