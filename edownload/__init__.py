"""Desktop downloader for posts, favourites and bulk pages from e926/e621-style post APIs."""

__version__ = "0.4.3"