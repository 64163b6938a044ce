"""Frame timing statistics (fps and rolling average frame time)."""
from __future__ import annotations

from collections import deque


class FrameStats:
    """
    Rolling frame time statistics.

    - fps is the number of frames recorded during the last completed second.
    - average_frame_time_ms is the mean over the last `history_size` frames.
    """

    def __init__(self, history_size: int = 60) -> None:
        if history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {history_size}")
        self._history: deque[float] = deque(maxlen=history_size)
        self._frames_this_second = 0
        self._second_elapsed = 0.0
        self._fps = 0

    @property
    def history_size(self) -> int:
        return self._history.maxlen

    @property
    def fps(self) -> int:
        return self._fps

    @property
    def history_ms(self) -> list[float]:
        """Frame times in milliseconds, oldest first."""
        return list(self._history)

    @property
    def average_frame_time_ms(self) -> float:
        if not self._history:
            return 0.0
        return sum(self._history) / len(self._history)

    def record(self, frame_time: float) -> None:
        """
        Record one rendered frame.

        :param frame_time: Seconds since the previous frame
        """
        frame_time = max(0.0, float(frame_time))
        self._history.append(frame_time * 1000.0)
        self._frames_this_second += 1
        self._second_elapsed += frame_time
        if self._second_elapsed >= 1.0:
            self._fps = self._frames_this_second
            self._frames_this_second = 0
            self._second_elapsed = 0.0

    def reset(self) -> None:
        self._history.clear()
        self._frames_this_second = 0
        self._second_elapsed = 0.0
        self._fps = 0
