"""
Entry point for running ffmpegkit as a module.

Usage: python -m ffmpegkit [command] [options]
"""

from ffmpegkit.cli.parser import main

if __name__ == "__main__":
    main()
