import pytest

from liveboard.core.errors import InvalidInput, RateLimited
from liveboard.services.rate_limit import SlidingWindowLimiter
from liveboard.state.playback_state import PlaybackState

from conftest import FakeClock


def test_playback_defaults_and_snapshot_is_a_copy():
    state = PlaybackState(default_title="Nothing yet")
    snap = state.snapshot()

    assert snap.volume == 100
    assert snap.playbackStatus == "stopped"
    assert snap.currentTitle == "Nothing yet"

    snap.volume = 3
    assert state.snapshot().volume == 100


def test_playback_writes_validate():
    state = PlaybackState()

    assert state.set_volume(0).volume == 0
    with pytest.raises(InvalidInput):
        state.set_volume(101)
    assert state.snapshot().volume == 0

    with pytest.raises(InvalidInput):
        state.set_status("ff")
    assert state.set_status("paused").playbackStatus == "paused"

    long_title = "t" * 1000
    assert len(state.set_title(long_title).currentTitle) == 300


def test_activity_flags_report_transitions_only():
    state = PlaybackState()

    assert state.mark_activity() is True
    assert state.mark_activity() is False
    assert state.mark_inactive() is True
    assert state.mark_inactive() is False


def test_sliding_window_limiter():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(name="t", max_hits=2, window_s=60, message="slow down", clock=clock)

    limiter.hit("1.1.1.1")
    limiter.hit("1.1.1.1")
    with pytest.raises(RateLimited) as exc:
        limiter.hit("1.1.1.1")
    assert exc.value.reason == "slow down"

    # outro ip tem a própria janela
    limiter.hit("2.2.2.2")

    clock.advance(60)
    limiter.hit("1.1.1.1")


def test_limiter_forgets_idle_ips():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(name="t", max_hits=2, window_s=60, message="slow down", clock=clock)

    for i in range(50):
        limiter.hit(f"10.0.0.{i}")
    assert len(limiter._hits) == 50

    clock.advance(60)
    limiter.hit("10.0.0.1")

    assert list(limiter._hits) == ["10.0.0.1"]
