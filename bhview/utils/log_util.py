import functools
import logging
import time
from typing import Any, Callable


logger = logging.getLogger("bhview")

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _safe_repr(x, maxlen=120):
    try:
        r = repr(x)
    except Exception:
        r = '<repr error>'
    if len(r) > maxlen:
        r = r[:maxlen] + '...'
    return r


def log_io(level: int = logging.DEBUG):
    """
    Log a call's arguments, result and duration.

    :param level: Log level used for the entry and exit lines
    """
    def deco(func: Callable):
        qualname = f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if logger.isEnabledFor(level):
                names = func.__code__.co_varnames[:func.__code__.co_argcount]
                arg_repr = [
                    f"{name}={_safe_repr(value)}"
                    for name, value in zip(names, args) if name not in ("self", "cls")
                ]
                arg_repr += [f"{k}={_safe_repr(v)}" for k, v in kwargs.items()]
                logger.log(level, "-> %s(%s)", qualname, ", ".join(arg_repr))

            t0 = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("Exception in %s", qualname)
                raise
            dt = (time.perf_counter() - t0) * 1000.0
            if logger.isEnabledFor(level):
                logger.log(level, "<- %s [%0.1f ms] = %s", qualname, dt, _safe_repr(result))
            return result
        return wrapper
    return deco


def level_from_name(value: Any, default: int = logging.INFO) -> int:
    """
    Normalize a level name or number to a logging level.

    Unknown values fall back to default.
    """
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)
        if s.upper() in _VALID_LEVELS:
            return getattr(logging, s.upper())
    return default
