"""
ytdl-engine — managed yt-dlp execution engine.
"""

__version__ = "0.1.0"
