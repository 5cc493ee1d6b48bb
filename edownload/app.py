"""Desktop front end: settings form, download jobs and progress reporting."""

from __future__ import annotations

import argparse
import enum
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .channels import GuiChannels
from .handler import DownloadCancelled, EHandler
from .util import DATA_DIR, DL_DIR, move_to_trash, open_dl_dir

TOAST_SECONDS = 1.5
TAGS_CHAR_LIMIT = 250
COUNT_RANGE = (1, 250)
PAGES_RANGE = (-1, 75)


class ToastKind(enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Toast:
    """A short notification shown to the user."""

    kind: ToastKind
    text: str


class DownloadJob(enum.Enum):
    """The kinds of download the interface can start."""

    FAVOURITES = "favourites"
    TAGS = "tags"
    BULK = "bulk"


def run_download(handler, job, open_folder, channels, cancel_event) -> bool:
    """Run one download job, reporting progress; return False if it was cancelled."""
    handler.cancel_event = cancel_event
    channels.dl_status_channel.put(True)
    action = {
        DownloadJob.FAVOURITES: handler.download_favourites,
        DownloadJob.TAGS: handler.download_with_tags,
        DownloadJob.BULK: handler.get_bulk_data,
    }[DownloadJob(job)]
    try:
        action()
    except DownloadCancelled:
        return False
    if cancel_event is not None and cancel_event.is_set():
        return False

    channels.dl_count_channel.put(0)
    channels.dl_status_channel.put(False)
    channels.finished_status_channel.put(True)
    if open_folder:
        open_dl_dir()
    return True


class Controller:
    """The interface's state and the actions behind its buttons."""

    def __init__(
        self,
        handler: EHandler | None = None,
        channels: GuiChannels | None = None,
        repaint: Callable[[], None] | None = None,
        key_path="key",
        opener: Callable[[], None] = open_dl_dir,
    ) -> None:
        self.channels = channels if channels is not None else GuiChannels()
        self.handler = handler if handler is not None else EHandler()
        self.handler.define_senders(
            self.channels.dl_count_channel, self.channels.post_count_channel
        )
        if repaint is not None:
            self.handler.define_gui(repaint)
        self.key_path = Path(key_path)
        self.opener = opener
        self.dl_count = 0
        self.post_count = 0
        self.open_folder = False
        self.downloading_status = False
        self.worker: threading.Thread | None = None
        self._cancel_event: threading.Event | None = None

    @property
    def running(self) -> bool:
        """Whether a download job is in progress."""
        return self.worker is not None

    def poll_channels(self) -> list[Toast]:
        """Apply pending worker messages to the state and return toasts to show."""
        toasts: list[Toast] = []
        while True:
            try:
                count = self.channels.dl_count_channel.get_nowait()
            except Exception:
                break
            if count < 1:
                self.dl_count = count
            self.dl_count += count

        post_count = GuiChannels.drain_latest(self.channels.post_count_channel)
        if post_count is not None:
            self.post_count = post_count

        status = GuiChannels.drain_latest(self.channels.dl_status_channel)
        if status is not None:
            self.downloading_status = status

        finished = GuiChannels.drain_latest(self.channels.finished_status_channel)
        if finished:
            toasts.append(Toast(ToastKind.INFO, "Finished Downloading!"))
            self.worker = None
            self._cancel_event = None
        return toasts

    def start_download(self, job) -> Toast:
        """Start a download job in the background unless one is already running."""
        job = DownloadJob(job)
        if job is DownloadJob.BULK and self.handler.pages == 0:
            return Toast(ToastKind.INFO, "You can't get 0 pages.")
        if self.running:
            return Toast(ToastKind.WARNING, "Cannot start a new download!")

        cancel_event = threading.Event()
        worker_handler = self.handler.copy()
        self._cancel_event = cancel_event
        self.worker = threading.Thread(
            target=run_download,
            args=(worker_handler, job, self.open_folder, self.channels, cancel_event),
            name=f"download-{job.value}",
            daemon=True,
        )
        self.worker.start()
        return Toast(ToastKind.INFO, "Starting Download...")

    def stop_download(self) -> Toast | None:
        """Cancel the running download; return None if nothing was running."""
        if not self.running:
            return None
        if self._cancel_event is not None:
            self._cancel_event.set()
        self.channels.dl_count_channel.put(0)
        self.channels.dl_status_channel.put(False)
        self.worker = None
        self._cancel_event = None
        return Toast(ToastKind.WARNING, "Aborted Download!")

    def set_api_key(self) -> Toast:
        """Load the API key from the key file."""
        if self.handler.check_api_key(self.key_path):
            return Toast(ToastKind.INFO, "API Key Loaded!")
        return Toast(ToastKind.WARNING, "API Key File Not Found!")

    def clear_api_key(self) -> Toast:
        """Forget the loaded API key."""
        self.handler.clear_api_key()
        return Toast(ToastKind.INFO, "API Key Cleared!")

    def open_dl_folder(self) -> Toast | None:
        """Open the download folder, or report that it does not exist."""
        if DL_DIR.exists():
            self.opener()
            return None
        return Toast(ToastKind.ERROR, "No Folder found!")

    def cleanup(self) -> Toast:
        """Move the download and data folders to the trash."""
        existing = [path for path in (DL_DIR, DATA_DIR) if path.exists()]
        if not existing:
            return Toast(ToastKind.ERROR, "No Folder/s found!")
        for path in existing:
            try:
                move_to_trash(path)
            except OSError:
                pass
        return Toast(ToastKind.INFO, "Cleaned Up!")


_TOAST_COLOURS = {
    ToastKind.INFO: "#1f5f1f",
    ToastKind.WARNING: "#8a6d00",
    ToastKind.ERROR: "#a00000",
}


class App:
    """The desktop window driving a Controller."""

    def __init__(self, controller: Controller | None = None) -> None:
        self.controller = controller if controller is not None else Controller()

    def run(self) -> None:
        """Build the window and run its event loop until it is closed."""
        import tkinter as tk

        controller = self.controller
        handler = controller.handler

        root = tk.Tk()
        root.title("E-CLI GUI")
        root.geometry("300x600")
        root.resizable(False, False)
        frame = tk.Frame(root, padx=8, pady=8)
        frame.pack(fill="both", expand=True)

        api_var = tk.StringVar(value=handler.api_source)
        user_var = tk.StringVar(value=handler.username)
        random_var = tk.BooleanVar(value=handler.random)
        lower_var = tk.BooleanVar(value=handler.lower_quality)
        open_var = tk.BooleanVar(value=controller.open_folder)
        count_var = tk.IntVar(value=handler.count)
        pages_var = tk.IntVar(value=handler.pages)

        row = tk.Frame(frame)
        row.pack(fill="x")
        tk.Label(row, text="Api Source").pack(side="left")
        tk.Entry(row, textvariable=api_var, width=14).pack(side="left", padx=4)

        tk.Label(frame, text="Username").pack(anchor="w", pady=(5, 0))
        tk.Entry(frame, textvariable=user_var, width=14).pack(anchor="w")
        tk.Label(
            frame,
            text="The API key is taken from a file called 'key' located where the program is.",
            wraplength=280,
            justify="left",
        ).pack(anchor="w", pady=5)

        toast_label = tk.Label(frame, text="", wraplength=280)
        toast_after: list[str] = []

        def show(toast: Toast | None) -> None:
            if toast is None:
                return
            for after_id in toast_after:
                root.after_cancel(after_id)
            toast_after.clear()
            toast_label.config(text=toast.text, fg=_TOAST_COLOURS[toast.kind])
            toast_after.append(
                root.after(int(TOAST_SECONDS * 1000), lambda: toast_label.config(text=""))
            )

        keys = tk.Frame(frame)
        keys.pack(fill="x")
        tk.Button(keys, text="Set API Key", command=lambda: show(controller.set_api_key())).pack(
            side="left"
        )
        tk.Button(
            keys, text="Clear API Key", command=lambda: show(controller.clear_api_key())
        ).pack(side="left", padx=3)

        tk.Label(frame, text="Tags to Search/Filter for:").pack(anchor="w", pady=(10, 0))
        tags_text = tk.Text(frame, height=4, width=36, wrap="word")
        tags_text.insert("1.0", handler.tags)
        tags_text.pack(fill="x")

        def limit_tags(_event=None) -> None:
            content = tags_text.get("1.0", "end-1c")
            if len(content) > TAGS_CHAR_LIMIT:
                tags_text.delete("1.0", "end")
                tags_text.insert("1.0", content[:TAGS_CHAR_LIMIT])

        tags_text.bind("<KeyRelease>", limit_tags)

        tk.Checkbutton(frame, text="Get Random Posts?", variable=random_var).pack(anchor="w")
        tk.Checkbutton(
            frame, text="Get lower quality of posts?", variable=lower_var
        ).pack(anchor="w")
        tk.Checkbutton(
            frame, text="Open /dl/ folder at download finish?", variable=open_var
        ).pack(anchor="w")

        tk.Scale(
            frame, from_=COUNT_RANGE[0], to=COUNT_RANGE[1], orient="horizontal",
            label="Download: Posts.", variable=count_var,
        ).pack(fill="x", pady=(10, 0))
        tk.Scale(
            frame, from_=PAGES_RANGE[0], to=PAGES_RANGE[1], orient="horizontal",
            label="Bulk Get: Pages.", variable=pages_var,
        ).pack(fill="x")

        def sync() -> None:
            handler.api_source = api_var.get()
            handler.username = user_var.get()
            handler.random = random_var.get()
            handler.lower_quality = lower_var.get()
            handler.count = count_var.get()
            handler.pages = pages_var.get()
            handler.tags = tags_text.get("1.0", "end-1c")[:TAGS_CHAR_LIMIT]
            controller.open_folder = open_var.get()

        def act(action: Callable[[], Toast | None]) -> Callable[[], None]:
            def command() -> None:
                sync()
                show(action())

            return command

        tk.Button(
            frame, text="Open the ./dl Folder", command=act(controller.open_dl_folder)
        ).pack(fill="x", pady=(15, 0))
        tk.Button(
            frame, text="Cleanup (Trash data/dl folder if exists)",
            bg="#7d0000", fg="white", command=act(controller.cleanup),
        ).pack(fill="x")

        tk.Label(frame, text="Main Functions:").pack(anchor="w", pady=(10, 0))
        for label, job in (
            ("Download Favourites", DownloadJob.FAVOURITES),
            ("Download Posts with Tags", DownloadJob.TAGS),
            ("Download Bulk", DownloadJob.BULK),
        ):
            tk.Button(
                frame, text=label,
                command=act(lambda job=job: controller.start_download(job)),
            ).pack(fill="x", pady=2)

        status_label = tk.Label(frame, text="")
        status_label.pack(pady=(10, 0))
        stop_button = tk.Button(frame, text="Stop Download", command=act(controller.stop_download))
        stop_button.pack(fill="x")
        toast_label.pack(side="bottom", pady=8)

        def tick() -> None:
            sync()
            for toast in controller.poll_channels():
                show(toast)
            if controller.downloading_status:
                status_label.config(
                    text=f"Downloading... ({controller.dl_count}/{controller.post_count})"
                )
            else:
                status_label.config(text="")
            stop_button.config(state="normal" if controller.running else "disabled")
            root.after(100, tick)

        tick()
        root.mainloop()


def main(argv=None) -> int:
    """Start the desktop downloader."""
    parser = argparse.ArgumentParser(
        prog="edownload", description="Download posts from an image board API."
    )
    parser.parse_args(argv)
    App().run()
    return 0