"""Dispatch timing configuration."""

import os
from dataclasses import dataclass

ENV_PRIORITY_DELAY = "CLINIC_QUEUE_PRIORITY_DELAY"
ENV_NORMAL_DELAY = "CLINIC_QUEUE_NORMAL_DELAY"
ENV_CURRENT_DELAY = "CLINIC_QUEUE_CURRENT_DELAY"


@dataclass(frozen=True)
class DispatchParams:
    priority_delay: float = 5.0   # seconds before a priority head is called
    normal_delay: float = 10.0    # seconds before a normal head is called
    current_delay: float = 10.0   # seconds a called ticket stays on display

    def __post_init__(self):
        for name in ("priority_delay", "normal_delay", "current_delay"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value!r}")

    @classmethod
    def from_env(cls, environ=None) -> "DispatchParams":
        """Build parameters from environment variables, read once at startup."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            priority_delay=_read_seconds(env, ENV_PRIORITY_DELAY, defaults.priority_delay),
            normal_delay=_read_seconds(env, ENV_NORMAL_DELAY, defaults.normal_delay),
            current_delay=_read_seconds(env, ENV_CURRENT_DELAY, defaults.current_delay),
        )


def _read_seconds(env, key: str, default: float) -> float:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number of seconds, got {raw!r}") from None
