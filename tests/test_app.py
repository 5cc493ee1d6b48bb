import json
import threading
import time

import pytest
import responses

from edownload.app import (
    Controller,
    DownloadJob,
    ToastKind,
    run_download,
)
from edownload.channels import GuiChannels
from edownload.handler import EHandler

API_URL = "https://api.example.com/posts.json"
FILE_URL = "https://static.example.com/a.png"

PAGE = {
    "posts": [
        {
            "id": 1,
            "file": {"ext": "png", "url": FILE_URL},
            "tags": {"artist": ["alice"]},
            "sample": {"has": False, "url": None, "alternates": {}},
        }
    ]
}


def drain(q):
    items = []
    while not q.empty():
        items.append(q.get_nowait())
    return items


def mock_http():
    return responses.RequestsMock(assert_all_requests_are_fired=False)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


def make_controller(**kwargs):
    handler = EHandler(api_source="api.example.com")
    return Controller(handler=handler, **kwargs)


def test_bulk_with_zero_pages_is_refused(workdir):
    controller = make_controller()
    controller.handler.pages = 0
    toast = controller.start_download(DownloadJob.BULK)
    assert toast.text == "You can't get 0 pages."
    assert toast.kind is ToastKind.INFO
    assert controller.running is False


def test_set_api_key_without_file(workdir):
    controller = make_controller()
    toast = controller.set_api_key()
    assert (toast.kind, toast.text) == (ToastKind.WARNING, "API Key File Not Found!")


def test_set_api_key_with_file(workdir):
    (workdir / "key").write_text("placeholder", encoding="utf-8")
    controller = make_controller()
    toast = controller.set_api_key()
    assert (toast.kind, toast.text) == (ToastKind.INFO, "API Key Loaded!")


def test_clear_api_key(workdir):
    controller = make_controller()
    toast = controller.clear_api_key()
    assert toast.text == "API Key Cleared!"


def test_open_dl_folder_missing(workdir):
    opened = []
    controller = make_controller(opener=lambda: opened.append(True))
    toast = controller.open_dl_folder()
    assert toast.kind is ToastKind.ERROR
    assert toast.text == "No Folder found!"
    assert opened == []


def test_open_dl_folder_present(workdir):
    (workdir / "dl").mkdir()
    opened = []
    controller = make_controller(opener=lambda: opened.append(True))
    assert controller.open_dl_folder() is None
    assert opened == [True]


def test_cleanup_without_folders(workdir):
    toast = make_controller().cleanup()
    assert (toast.kind, toast.text) == (ToastKind.ERROR, "No Folder/s found!")


def test_cleanup_moves_folders(workdir):
    (workdir / "dl").mkdir()
    (workdir / "data").mkdir()
    (workdir / "dl" / "x.png").write_bytes(b"x")
    toast = make_controller().cleanup()
    assert toast.text == "Cleaned Up!"
    assert not (workdir / "dl").exists()
    assert not (workdir / "data").exists()


def test_poll_channels_counts_and_resets(workdir):
    controller = make_controller()
    channels = controller.channels
    channels.post_count_channel.put(7)
    channels.dl_count_channel.put(1)
    channels.dl_count_channel.put(1)
    channels.dl_status_channel.put(True)
    assert controller.poll_channels() == []
    assert controller.post_count == 7
    assert controller.dl_count == 2
    assert controller.downloading_status is True

    channels.dl_count_channel.put(0)
    controller.poll_channels()
    assert controller.dl_count == 0


def test_poll_channels_finished(workdir):
    controller = make_controller()
    controller.channels.finished_status_channel.put(True)
    toasts = controller.poll_channels()
    assert [t.text for t in toasts] == ["Finished Downloading!"]
    assert controller.running is False


def test_stop_without_task(workdir):
    assert make_controller().stop_download() is None


def test_run_download_tags(workdir):
    channels = GuiChannels()
    handler = EHandler(api_source="api.example.com")
    handler.define_senders(channels.dl_count_channel, channels.post_count_channel)
    with mock_http() as rsps:
        rsps.add(responses.GET, API_URL, json=PAGE)
        rsps.add(responses.GET, FILE_URL, body=b"data")
        result = run_download(handler, DownloadJob.TAGS, False, channels, threading.Event())

    assert result is True
    assert (workdir / "dl" / "alice-1.png").read_bytes() == b"data"
    assert drain(channels.dl_status_channel) == [True, False]
    assert drain(channels.finished_status_channel) == [True]
    assert drain(channels.dl_count_channel) == [1, 0]
    assert drain(channels.post_count_channel) == [0, 1]


def test_run_download_cancelled(workdir):
    channels = GuiChannels()
    handler = EHandler(api_source="api.example.com")
    handler.define_senders(channels.dl_count_channel, channels.post_count_channel)
    event = threading.Event()
    event.set()
    with mock_http() as rsps:
        rsps.add(responses.GET, API_URL, json=PAGE)
        result = run_download(handler, DownloadJob.TAGS, False, channels, event)

    assert result is False
    assert drain(channels.dl_status_channel) == [True]
    assert drain(channels.finished_status_channel) == []
    assert not (workdir / "dl" / "alice-1.png").exists()


def test_controller_full_download(workdir):
    controller = make_controller()
    with mock_http() as rsps:
        rsps.add(responses.GET, API_URL, json=PAGE)
        rsps.add(responses.GET, FILE_URL, body=b"data")

        toast = controller.start_download(DownloadJob.TAGS)
        assert toast.text == "Starting Download..."
        busy = controller.start_download(DownloadJob.TAGS)
        assert busy.kind in (ToastKind.WARNING, ToastKind.INFO)

        finished = []
        deadline = time.monotonic() + 10
        while not finished and time.monotonic() < deadline:
            finished = [t for t in controller.poll_channels() if t.text == "Finished Downloading!"]
            time.sleep(0.01)
        thread = controller.worker
        if thread is not None:
            thread.join(5)

    assert len(finished) == 1
    assert controller.running is False
    assert (workdir / "dl" / "alice-1.png").read_bytes() == b"data"


def test_controller_refuses_second_download(workdir):
    release = threading.Event()

    def slow(request):
        release.wait(5)
        return 200, {}, '{"posts": []}'

    controller = make_controller()
    with mock_http() as rsps:
        rsps.add_callback(responses.GET, API_URL, callback=slow)
        controller.start_download(DownloadJob.TAGS)
        toast = controller.start_download(DownloadJob.FAVOURITES)
        thread = controller.worker
        release.set()
        thread.join(5)

    assert (toast.kind, toast.text) == (ToastKind.WARNING, "Cannot start a new download!")
    assert thread.is_alive() is False


def test_stop_download_cancels_worker(workdir):
    release = threading.Event()

    def slow(request):
        release.wait(5)
        return 200, {}, json.dumps(PAGE)

    controller = make_controller()
    with mock_http() as rsps:
        rsps.add_callback(responses.GET, API_URL, callback=slow)
        controller.start_download(DownloadJob.TAGS)
        thread = controller.worker

        toast = controller.stop_download()
        running = controller.running
        release.set()
        thread.join(5)

    assert (toast.kind, toast.text) == (ToastKind.WARNING, "Aborted Download!")
    assert running is False
    assert thread.is_alive() is False
    assert drain(controller.channels.finished_status_channel) == []
    assert not (workdir / "dl" / "alice-1.png").exists()