"""Result of a primary action that carried best-effort side effects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class ActionResult(Generic[T]):
    """Primary value plus the errors raised by its side effects.

    A failed side effect never replaces ``value``; it is only listed in
    ``side_effect_errors``.
    """

    value: T
    side_effect_errors: list[BaseException] = field(default_factory=list)

    @property
    def side_effects_ok(self) -> bool:
        return not self.side_effect_errors


__all__ = ["ActionResult"]
