# edownload

A small desktop tool that fetches posts from an e926/e621-style post API
and saves them in a `./dl/` folder under the directory it is started from.

## Installing

    pip install .

The window is built with `tkinter`. Some Python installations ship it as a
separate system package.

To run the tests, install the `test` extra:

    pip install ".[test]"
    pytest

## Starting it

    edownload

The command takes no options other than `--help`. It opens a window with
these settings:

- **Api Source**: the host to query. The default is `e926.net`. Requests go
  to `https://<host>/posts.json`.
- **Username**: the user whose favourites are fetched. It is also the user
  name for authenticated requests.
- **Tags to Search/Filter for**: added to the query as written. At most 250
  characters are kept.
- **Get Random Posts?**: adds `order:random` to the query.
- **Get lower quality of posts?**: for a video, downloads the first `480p`
  alternate URL. Otherwise it downloads the sample URL, and falls back to
  the original file when the post has no sample.
- **Open /dl/ folder at download finish?**: opens the folder when a download
  finishes. It uses `explorer` on Windows, `open` on macOS and `xdg-open`
  elsewhere.
- **Download: Posts.** (1–250, default 5): the number of posts asked for per
  request.
- **Bulk Get: Pages.** (-1–75, default 5): the number of pages a bulk
  download fetches. `-1` keeps fetching until a page comes back empty. `0`
  is refused.

## Downloads

- **Download Favourites**: fetches the favourites of the user name. It does
  nothing if the user name is empty.
- **Download Posts with Tags**: fetches the posts that match the tags.
- **Download Bulk**: moves any existing `./data/` folder to the trash. It
  then saves each page as `./data/post_page_<n>.json`. When all pages are
  fetched, it downloads the posts from every saved page. If a user name is
  set, the query is limited to that user's favourites.

Each file is saved as `./dl/<artists>-<id>.<ext>`. Several artists are
joined with `, `. A post with no artist is saved under `unknown-artist`. A
file that already exists is skipped, but it still counts toward the
progress shown as `Downloading... (done/total)`.

Only one download runs at a time. **Stop Download** cancels the running
download. The file being written when you press it is still finished; the
download stops before the next post.

## API key

Put your API key in a file named `key` in the directory you start the
program from, then press **Set API Key**. The key is read exactly as
written, so the file should not end with a newline. Once the key is loaded,
requests use HTTP basic authentication with the user name and the key.
**Clear API Key** forgets the key.

## Cleanup

**Open the ./dl Folder** opens the download folder in the file manager.

**Cleanup (Trash data/dl folder if exists)** moves `./dl` and `./data` into
a trash folder. On macOS this is `~/.Trash`. Elsewhere it is the freedesktop
trash at `$XDG_DATA_HOME/Trash`, or `~/.local/share/Trash` when that
variable is unset. This also applies on Windows, so nothing goes to the
Windows Recycle Bin.

## Using it from Python

The pieces behind the window can be used on their own:

- `edownload.handler.EHandler` holds the search settings and has these
  methods:
  - `download_favourites()`
  - `download_with_tags()`
  - `get_bulk_data()`
  - `check_api_key(key_path)`
  - `clear_api_key()`
  - `parse_artists(tags)`

  It takes an optional `threading.Event` as `cancel_event`. When that event
  is set, the next check raises `DownloadCancelled`.
- `edownload.app.Controller` holds the window's state and the actions behind
  its buttons. Each action returns a `Toast` message. `run_download` runs one
  `DownloadJob` (`FAVOURITES`, `TAGS` or `BULK`) and reports progress
  through `GuiChannels`.
- `edownload.api_defs` defines the post listing: `Posts`, `Post`,
  `PostFile`, `Tags`, `Sample`, `Alternates` and `LowerQuality`. Each class
  has `from_dict`/`to_dict`. `Posts` also has `from_json`/`to_json`.
- `edownload.util` has these helpers:
  - `download`
  - `lower_quality_dl`
  - `create_dl_dir`
  - `create_data_dir`
  - `open_dl_dir`
  - `move_to_trash`

## What it does not do

- Downloads are not retried or resumed.
- A partly written file is left in place.
- A failed request ends the download with an error; it is not reported in
  the window.
- Settings are not saved between runs.