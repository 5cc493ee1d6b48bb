"""Data model of the post listing returned by the posts API."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _require(data: Mapping[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r}") from None


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = _require(data, key)
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string or null")
    return value


def _require_list(data: Mapping[str, Any], key: str) -> list[Any]:
    value = _require(data, key)
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list")
    return value


@dataclass
class LowerQuality:
    """A reduced-quality alternate of a post's media."""

    media_type: str
    urls: list[str | None] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> LowerQuality:
        data = _mapping(data, "lower quality alternate")
        urls = _require_list(data, "urls")
        if any(url is not None and not isinstance(url, str) for url in urls):
            raise ValueError("field 'urls' must hold strings or nulls")
        return cls(media_type=_require_str(data, "type"), urls=list(urls))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.media_type, "urls": list(self.urls)}


@dataclass
class Alternates:
    """Alternate renditions of a sample."""

    lower_quality: LowerQuality | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Alternates:
        data = _mapping(data, "alternates")
        raw = data.get("480p")
        return cls(lower_quality=None if raw is None else LowerQuality.from_dict(raw))

    def to_dict(self) -> dict[str, Any]:
        return {
            "480p": None if self.lower_quality is None else self.lower_quality.to_dict()
        }


@dataclass
class Sample:
    """The sample (preview) rendition of a post."""

    has: bool
    url: str | None = None
    alternates: Alternates = field(default_factory=Alternates)

    @classmethod
    def from_dict(cls, data: Any) -> Sample:
        data = _mapping(data, "sample")
        has = _require(data, "has")
        if not isinstance(has, bool):
            raise ValueError("field 'has' must be a boolean")
        return cls(
            has=has,
            url=_optional_str(data, "url"),
            alternates=Alternates.from_dict(_require(data, "alternates")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"has": self.has, "url": self.url, "alternates": self.alternates.to_dict()}


@dataclass
class PostFile:
    """The original file of a post."""

    ext: str
    url: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PostFile:
        data = _mapping(data, "file")
        return cls(ext=_require_str(data, "ext"), url=_optional_str(data, "url"))

    def to_dict(self) -> dict[str, Any]:
        return {"ext": self.ext, "url": self.url}


@dataclass
class Tags:
    """The tag groups of a post that the downloader uses."""

    artist: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Tags:
        data = _mapping(data, "tags")
        artist = _require_list(data, "artist")
        if not all(isinstance(name, str) for name in artist):
            raise ValueError("field 'artist' must hold strings")
        return cls(artist=list(artist))

    def to_dict(self) -> dict[str, Any]:
        return {"artist": list(self.artist)}


@dataclass
class Post:
    """A single post."""

    id: int
    file: PostFile
    tags: Tags
    sample: Sample

    @classmethod
    def from_dict(cls, data: Any) -> Post:
        data = _mapping(data, "post")
        post_id = _require(data, "id")
        if isinstance(post_id, bool) or not isinstance(post_id, int) or post_id < 0:
            raise ValueError("field 'id' must be a non-negative integer")
        return cls(
            id=post_id,
            file=PostFile.from_dict(_require(data, "file")),
            tags=Tags.from_dict(_require(data, "tags")),
            sample=Sample.from_dict(_require(data, "sample")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "file": self.file.to_dict(),
            "tags": self.tags.to_dict(),
            "sample": self.sample.to_dict(),
        }


@dataclass
class Posts:
    """A page of posts as returned by the API."""

    posts: list[Post] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Posts:
        data = _mapping(data, "posts page")
        return cls(posts=[Post.from_dict(item) for item in _require_list(data, "posts")])

    def to_dict(self) -> dict[str, Any]:
        return {"posts": [post.to_dict() for post in self.posts]}

    @classmethod
    def from_json(cls, text: str | bytes) -> Posts:
        return cls.from_dict(json.loads(text))

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))