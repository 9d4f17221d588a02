"""Tests for per-frame coalescing of repaint requests."""
from FloatDesk.utils.frame_throttle import FrameThrottle


def test_flush_emits_keys_in_request_order(spy):
    throttle = FrameThrottle()
    flushed = spy(throttle.flushed)

    for key in ("b", "a", "b", "c"):
        throttle.schedule(key)
    throttle.flush()

    assert flushed.calls == [(["b", "a", "c"],)]
    assert throttle.frames_flushed == 1
    assert not throttle.is_pending()


def test_flush_with_nothing_pending(spy):
    throttle = FrameThrottle()
    flushed = spy(throttle.flushed)
    throttle.flush()
    assert flushed.count == 0


def test_cancel_single_key(spy):
    throttle = FrameThrottle()
    flushed = spy(throttle.flushed)
    throttle.schedule("a")
    throttle.schedule("b")

    throttle.cancel("a")
    assert throttle.is_pending("b")
    assert not throttle.is_pending("a")

    throttle.flush()
    assert flushed.calls == [(["b"],)]


def test_timer_fires_once_per_frame(spy, qtbot):
    throttle = FrameThrottle(interval_ms=5)
    flushed = spy(throttle.flushed)

    throttle.schedule("a")
    throttle.schedule("a")
    qtbot.waitUntil(lambda: flushed.count == 1, timeout=1000)
    qtbot.wait(30)

    assert flushed.count == 1


def test_cancel_all_stops_timer(spy, qtbot):
    throttle = FrameThrottle(interval_ms=5)
    flushed = spy(throttle.flushed)
    throttle.schedule("a")
    throttle.cancel()

    qtbot.wait(30)
    assert flushed.count == 0
