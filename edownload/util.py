"""File, download and folder helpers used by the downloader."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from urllib.parse import quote

import requests

from .api_defs import Post

DL_DIR = Path("dl")
DATA_DIR = Path("data")

_CHUNK_SIZE = 64 * 1024


def _target_path(artist_name: str, post_id: int, file_ext: str) -> Path:
    return DL_DIR / f"{artist_name}-{post_id}.{file_ext}"


def download(target_url, file_ext, post_id, artist_name, session=None) -> float:
    """Download a file into the dl directory and return its size in bytes."""
    getter = session if session is not None else requests
    written = 0
    with getter.get(target_url, stream=True) as response:
        with _target_path(artist_name, post_id, file_ext).open("wb") as out:
            try:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    written += out.write(chunk)
            except requests.RequestException:
                pass
    return float(written)


def _no_url(artist_name: str, post: Post) -> float:
    print(f"Cannot download post {artist_name}-{post.id} due it not having any file url.")
    return 0.0


def lower_quality_dl(post: Post, artist_name: str, session=None) -> float:
    """Download a reduced-quality rendition of a post, falling back as available."""
    print("Trying to download lower quality media...")
    if not post.sample.has:
        if post.file.url is not None:
            return download(post.file.url, post.file.ext, post.id, artist_name, session)
        return _no_url(artist_name, post)

    lower = post.sample.alternates.lower_quality
    if lower is not None and lower.media_type == "video":
        if not lower.urls:
            raise ValueError(f"post {post.id} has a video alternate without urls")
        url = lower.urls[0]
        if url is None:
            raise ValueError(f"post {post.id} has a video alternate with a null url")
        return download(url, post.file.ext, post.id, artist_name, session)

    if post.sample.url is not None:
        return download(post.sample.url, post.file.ext, post.id, artist_name, session)
    return _no_url(artist_name, post)


def _create_dir(path: Path) -> bool:
    if path.exists():
        return False
    path.mkdir(parents=True)
    return True


def create_dl_dir() -> bool:
    """Create the dl directory; return True if it did not exist before."""
    return _create_dir(DL_DIR)


def create_data_dir() -> bool:
    """Create the data directory; return True if it did not exist before."""
    return _create_dir(DATA_DIR)


def open_dl_dir() -> None:
    """Open the dl directory in the platform's file manager and wait for it."""
    if sys.platform.startswith("win"):
        command = ["explorer", r".\dl"]
    elif sys.platform == "darwin":
        command = ["open", str(DL_DIR)]
    else:
        command = ["xdg-open", str(DL_DIR)]
    subprocess.run(command, check=False)


def _unique_name(directory: Path, name: str) -> str:
    candidate = name
    counter = 1
    while (directory / candidate).exists() or (directory / candidate).is_symlink():
        counter += 1
        candidate = f"{name}.{counter}"
    return candidate


def move_to_trash(path) -> Path:
    """Move a file or directory into the user's trash and return its new location."""
    source = Path(path)
    if not source.exists() and not source.is_symlink():
        raise FileNotFoundError(f"no such file or directory: {source}")
    source = source.absolute()

    if sys.platform == "darwin":
        files_dir = Path.home() / ".Trash"
        info_dir = None
    else:
        base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
        trash_root = Path(base) / "Trash"
        files_dir = trash_root / "files"
        info_dir = trash_root / "info"
        info_dir.mkdir(parents=True, exist_ok=True)
    files_dir.mkdir(parents=True, exist_ok=True)

    name = _unique_name(files_dir, source.name)
    if info_dir is not None:
        while (info_dir / f"{name}.trashinfo").exists():
            name = _unique_name(files_dir, f"{name}.x")
        stamp = datetime.now().strftime("%Y-%m-%dT%H:%M:%S")
        (info_dir / f"{name}.trashinfo").write_text(
            f"[Trash Info]\nPath={quote(str(source))}\nDeletionDate={stamp}\n",
            encoding="utf-8",
        )
    destination = files_dir / name
    shutil.move(str(source), str(destination))
    return destination