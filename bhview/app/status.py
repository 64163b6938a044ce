import math
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class StatusField:
    """
    A labelled value shown in the status bar.

    :ivar label: The label/name of the status field.
    :ivar fmt: Format string used when no formatter is given.
    :ivar formatter: Callable turning the value into display text.
    :ivar value: The current value.
    :ivar visible: Whether the field gets a label in the status bar.
    """
    label: str
    fmt: str = "{}"
    formatter: Callable[[Any], str] = None
    value: float | int = 0.0
    visible: bool = True

    def __post_init__(self):
        if self.formatter is None:
            self.formatter = lambda v, fmt=self.fmt: fmt.format(v)

    def text(self) -> str:
        return f"{self.label}: {self.formatter(self.value)}"


def format_orbit_angle(angle: float) -> str:
    """Orbit angle in radians, shown in degrees."""
    return f"{math.degrees(angle):.1f}°"


def format_speed(speed: float) -> str:
    """Speed as a fraction of c."""
    return f"{speed:.3f} c"


def format_orbit_state(orbiting: bool) -> str:
    return "auto" if orbiting else "manual"


# To add a field: add it here, then update it from MainWindow._refresh_status.
STATUS_FIELDS = {
    "orbit_angle": StatusField(label="Angle", formatter=format_orbit_angle),
    "distance": StatusField(label="Distance", fmt="{:.2f}"),
    "height": StatusField(label="Height", fmt="{:.2f}"),
    "speed": StatusField(label="Speed", formatter=format_speed),
    "orbit": StatusField(label="Orbit", formatter=format_orbit_state, value=True),
    "fps": StatusField(label="FPS", fmt="{:d}", value=0),
    "frame_time": StatusField(label="Frame", fmt="{:.1f} ms"),
}
