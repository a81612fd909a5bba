"""
Video info — the typed view of ``yt-dlp --dump-json`` output.

Only the commonly used keys are modelled; everything else in the
document is ignored.  Every field is optional because extractors omit
or null out keys freely.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _DumpJsonModel(BaseModel):
    """Lenient base: unknown keys are ignored, a null list or mapping reads as empty."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_null_collections(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        fields = cls.model_fields
        return {
            key: value
            for key, value in data.items()
            if value is not None or key not in fields or fields[key].default_factory is None
        }


class VideoThumbnail(_DumpJsonModel):

    id: str | None = None
    url: str | None = None
    width: int | None = None
    height: int | None = None


class VideoFormat(_DumpJsonModel):
    """One entry of ``formats`` / ``requested_formats``."""

    format_id: str | None = None
    format_note: str | None = None
    format: str | None = None
    ext: str | None = None
    url: str | None = None
    manifest_url: str | None = None
    width: int | None = None
    height: int | None = None
    fps: float | None = None
    vcodec: str | None = None
    acodec: str | None = None
    abr: float | None = None
    tbr: float | None = None
    asr: int | None = None
    filesize: int | None = None
    filesize_approx: int | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)


class VideoInfo(_DumpJsonModel):
    """Metadata for a single video."""

    id: str | None = None
    title: str | None = None
    fulltitle: str | None = None
    display_id: str | None = None
    description: str | None = None
    uploader: str | None = None
    uploader_id: str | None = None
    channel: str | None = None
    upload_date: str | None = None
    duration: float | None = None
    view_count: int | None = None
    like_count: int | None = None
    repost_count: int | None = None
    average_rating: float | None = None
    age_limit: int | None = None
    is_live: bool | None = None

    webpage_url: str | None = None
    extractor: str | None = None
    extractor_key: str | None = None

    # Selected format
    url: str | None = None
    ext: str | None = None
    format: str | None = None
    format_id: str | None = None
    width: int | None = None
    height: int | None = None
    fps: float | None = None
    resolution: str | None = None
    filesize: int | None = None

    thumbnail: str | None = None
    thumbnails: list[VideoThumbnail] = Field(default_factory=list)
    formats: list[VideoFormat] = Field(default_factory=list)
    requested_formats: list[VideoFormat] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    http_headers: dict[str, str] = Field(default_factory=dict)
