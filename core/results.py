# core/results.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Ok:
    """Successful provider/backend outcome carrying the validated payload."""

    value: Any = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome. `message` is safe to show to the end user."""

    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok, Err]
