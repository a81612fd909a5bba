"""
Domain models for the engine.

All models are re-exported here for convenient access:

    from ytdl_engine.core.models import YoutubeDLRequest, YoutubeDLResponse, VideoInfo
"""

from ytdl_engine.core.models.dependency import Dependency, DependencySnapshot
from ytdl_engine.core.models.request import YoutubeDLRequest
from ytdl_engine.core.models.response import YoutubeDLResponse
from ytdl_engine.core.models.state import EngineState
from ytdl_engine.core.models.video import VideoFormat, VideoInfo, VideoThumbnail

__all__ = [
    # dependency.py
    "Dependency",
    "DependencySnapshot",
    # state.py
    "EngineState",
    # video.py
    "VideoFormat",
    "VideoInfo",
    "VideoThumbnail",
    # request.py
    "YoutubeDLRequest",
    # response.py
    "YoutubeDLResponse",
]
