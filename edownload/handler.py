"""Queries the posts API and downloads the posts it returns."""

from __future__ import annotations

import copy as _copy
import queue
import threading
from collections.abc import Callable
from pathlib import Path

import requests

from .api_defs import Post, Posts, Tags
from .util import (
    DATA_DIR,
    DL_DIR,
    create_data_dir,
    create_dl_dir,
    download,
    lower_quality_dl,
    move_to_trash,
)

USER_AGENT = "edownload-post-download/0.1"
DEFAULT_API_SOURCE = "e926.net"


class DownloadCancelled(Exception):
    """Raised when a running download is asked to stop."""


def _debug_quote(text: str) -> str:
    """Quote a string with escapes for backslashes, quotes and control characters."""
    escaped = []
    for char in text:
        if char == "\\":
            escaped.append("\\\\")
        elif char == '"':
            escaped.append('\\"')
        elif char == "\n":
            escaped.append("\\n")
        elif char == "\r":
            escaped.append("\\r")
        elif char == "\t":
            escaped.append("\\t")
        elif not char.isprintable() and char != " ":
            escaped.append(f"\\u{{{ord(char):x}}}")
        else:
            escaped.append(char)
    return '"' + "".join(escaped) + '"'


def _new_session() -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session


class EHandler:
    """Holds the search settings and performs the downloads."""

    def __init__(
        self,
        username: str = "",
        count: int = 5,
        pages: int = 5,
        random: bool = False,
        tags: str = "",
        lower_quality: bool = False,
        api_source: str = DEFAULT_API_SOURCE,
        session: requests.Session | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.username = username
        self.count = count
        self.pages = pages
        self.random = random
        self.tags = tags
        self.lower_quality = lower_quality
        self.api_source = api_source
        self.session = session if session is not None else _new_session()
        self.cancel_event = cancel_event
        self.dl_count_tx: queue.Queue[int] | None = None
        self.post_count_tx: queue.Queue[int] | None = None
        self._api_key = ""
        self._repaint: Callable[[], None] | None = None

    def define_gui(self, repaint: Callable[[], None]) -> None:
        """Register the callback that asks the interface to redraw."""
        self._repaint = repaint

    def check_api_key(self, key_path="key") -> bool:
        """Load the API key from a file; return True if a non-empty key was read."""
        path = Path(key_path)
        if not path.exists():
            return False
        key = path.read_text(encoding="utf-8")
        if not key:
            return False
        self._api_key = key
        return True

    def clear_api_key(self) -> None:
        """Forget the loaded API key."""
        self._api_key = ""

    def define_senders(self, dl_count_tx, post_count_tx) -> None:
        """Set the queues that receive download and post counts."""
        self.dl_count_tx = dl_count_tx
        self.post_count_tx = post_count_tx

    def parse_artists(self, tags: Tags) -> str:
        """Join the artist names of a post, or name it an unknown artist."""
        if not tags.artist:
            return "unknown-artist"
        return ", ".join(tags.artist)

    def copy(self) -> EHandler:
        """Return an independent copy of the settings sharing the same session."""
        return _copy.copy(self)

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise DownloadCancelled("download was cancelled")

    def _send_post_count(self, amount: int) -> None:
        if self.post_count_tx is not None:
            self.post_count_tx.put(amount)

    def _report_downloaded(self) -> None:
        if self.dl_count_tx is not None:
            self.dl_count_tx.put(1)
        if self._repaint is not None:
            self._repaint()

    def _random_check(self) -> str:
        return "order:random" if self.random else ""

    def _request_posts(self, target: str) -> Posts:
        auth = (self.username, self._api_key) if self._api_key else None
        response = self.session.get(target, auth=auth)
        return Posts.from_dict(response.json())

    def _download_post(self, post: Post, artist_name: str) -> float:
        if self.lower_quality:
            return lower_quality_dl(post, artist_name, self.session)
        if post.file.url is None:
            print(
                f"Cannot download post {artist_name}-{post.id} "
                "due to it missing a file url"
            )
            return 0.0
        return download(post.file.url, post.file.ext, post.id, artist_name, self.session)

    def _handle_download(self, data: Posts) -> None:
        for post in data.posts:
            self._check_cancelled()
            artist_name = self.parse_artists(post.tags)
            name = f"{artist_name}-{post.id}.{post.file.ext}"
            print(f"Starting download of {name}")

            if (DL_DIR / name).exists():
                print(f"File {name} already Exists!\n")
            else:
                file_size = self._download_post(post, artist_name)
                print(
                    f"Downloaded {name}! File size: "
                    f"{file_size / 1024.0 / 1024.0:.2f} MB\n"
                )
            self._report_downloaded()
        print("Download Complete!")

    def _fetch_and_download(self, target: str) -> None:
        data = self._request_posts(target)
        if not data.posts:
            print("No post found...")
        self._send_post_count(len(data.posts))
        if create_dl_dir():
            print("Created a ./dl/ directory for all the downloaded files.\n")
        self._handle_download(data)

    def download_favourites(self) -> None:
        """Download the favourites of the configured user."""
        self._send_post_count(0)
        print(
            f"Downloading {self.count} Favorites of {self.username} "
            "into the ./dl/ folder!\n"
        )
        if not self.username:
            return
        target = (
            f"https://{self.api_source}/posts.json?tags=fav:{_debug_quote(self.username)}"
            f" {self.tags} {self._random_check()}&limit={self.count}"
        )
        self._fetch_and_download(target)

    def download_with_tags(self) -> None:
        """Download posts matching the configured tags."""
        self._send_post_count(0)
        print("Downloading posts, into the ./dl/ folder!\n")
        target = (
            f"https://{self.api_source}/posts.json?tags={self.tags}"
            f" {self._random_check()}&limit={self.count}"
        )
        self._fetch_and_download(target)

    def get_bulk_data(self) -> None:
        """Fetch several result pages into the data directory, then download them."""
        self._send_post_count(0)
        print("Downloading posts, into the ./dl/ folder!\n")

        fav = f"fav:{_debug_quote(self.username)}" if self.username else ""

        if DATA_DIR.exists():
            try:
                move_to_trash(DATA_DIR)
            except OSError:
                pass
        create_data_dir()

        page = 0
        posts_amount = 0
        while self.pages == -1 or page != self.pages:
            self._check_cancelled()
            target = (
                f"https://{self.api_source}/posts.json?tags={fav} {self.tags}"
                f" {self._random_check()}&limit={self.count}&page={page + 1}"
            )
            data = self._request_posts(target)
            if not data.posts:
                break
            posts_amount += len(data.posts)
            (DATA_DIR / f"post_page_{page + 1}.json").write_text(
                data.to_json(), encoding="utf-8"
            )
            page += 1

        num_files = page
        print(f"Finished getting data! Num. of data files: {num_files}")

        if create_dl_dir():
            print("Created a ./dl/ directory for all the downloaded files.\n")

        self._send_post_count(posts_amount)

        for number in range(1, num_files + 1):
            contents = (DATA_DIR / f"post_page_{number}.json").read_text(encoding="utf-8")
            self._handle_download(Posts.from_json(contents))