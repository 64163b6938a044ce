import pytest

from bhview.core.frame_stats import FrameStats
from bhview.core.render_quality import QUALITY_PRESETS, get_quality


def test_history_is_windowed():
    stats = FrameStats(history_size=3)
    for ms in (10, 20, 30, 40):
        stats.record(ms / 1000.0)
    assert stats.history_ms == pytest.approx([20.0, 30.0, 40.0])
    assert stats.average_frame_time_ms == pytest.approx(30.0)
    assert stats.history_size == 3


def test_fps_updates_once_per_second():
    stats = FrameStats()
    for _ in range(59):
        stats.record(1 / 60)
    assert stats.fps == 0
    stats.record(1 / 60 + 1e-9)
    assert stats.fps == 60


def test_reset():
    stats = FrameStats()
    stats.record(0.5)
    stats.record(0.6)
    stats.reset()
    assert stats.history_ms == []
    assert stats.fps == 0
    assert stats.average_frame_time_ms == 0.0


def test_invalid_history_size():
    with pytest.raises(ValueError):
        FrameStats(history_size=0)


@pytest.mark.parametrize("name, step, num_steps", [
    ("low", 0.1, 300),
    ("medium", 0.05, 600),
    ("high", 0.02, 1000),
])
def test_quality_presets(name, step, num_steps):
    quality = get_quality(name)
    assert (quality.step, quality.num_steps) == (step, num_steps)
    assert f"#define NSTEPS {num_steps}" in quality.shader_defines()
    assert f"#define STEP {step}" in quality.shader_defines()


def test_unknown_quality_falls_back_to_medium(caplog):
    assert get_quality("ultra") is QUALITY_PRESETS["medium"]
    assert "ultra" in caplog.text


def test_quality_lookup_ignores_case():
    assert get_quality(" High ").name == "high"
