import threading

from edownload.channels import GuiChannels


def test_drain_latest_returns_last_and_empties():
    channels = GuiChannels()
    for value in (1, 2, 3):
        channels.post_count_channel.put(value)
    assert GuiChannels.drain_latest(channels.post_count_channel) == 3
    assert channels.post_count_channel.empty()


def test_drain_latest_on_empty_queue():
    channels = GuiChannels()
    assert GuiChannels.drain_latest(channels.dl_status_channel) is None


def test_channels_are_independent():
    channels = GuiChannels()
    channels.dl_count_channel.put(1)
    assert channels.post_count_channel.empty()
    assert channels.dl_count_channel.qsize() == 1


def test_instances_do_not_share_queues():
    first, second = GuiChannels(), GuiChannels()
    first.finished_status_channel.put(True)
    assert second.finished_status_channel.empty()


def test_values_cross_threads():
    channels = GuiChannels()
    worker = threading.Thread(target=channels.dl_status_channel.put, args=(True,))
    worker.start()
    worker.join()
    assert GuiChannels.drain_latest(channels.dl_status_channel) is True