"""Recoverable error conditions raised by the observer kinematics core."""
from __future__ import annotations


class KinematicsError(Exception):
    """Base class for all locally recoverable kinematics errors."""


class InvalidParameter(KinematicsError, ValueError):
    """
    A setter received a NaN, infinite or negative value.

    The prior valid value is retained.
    """

    def __init__(self, name: str, value: object, reason: str = "") -> None:
        self.name = name
        self.value = value
        msg = f"Invalid value for {name}: {value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class AlreadyDragging(KinematicsError, RuntimeError):
    """A drag was started while another pointer already owns the drag."""

    def __init__(self, active_pointer: int, requested_pointer: int) -> None:
        self.active_pointer = active_pointer
        self.requested_pointer = requested_pointer
        super().__init__(
            f"Pointer {requested_pointer} cannot start a drag: "
            f"pointer {active_pointer} is already dragging."
        )


class DegenerateBasis(KinematicsError, ArithmeticError):
    """The viewing basis would contain a zero-length or non-finite vector."""
