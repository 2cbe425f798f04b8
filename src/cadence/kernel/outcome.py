"""Invocation outcomes - pure and dependency-free."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class Outcome(Generic[V]):
    """
    How one invocation of the user operation settled.

    Kinds:
    - value: The operation returned a result
    - error: The operation raised; the error is fatal for the stream
    - cancelled: The invocation's cancel scope fired before it settled
      (or the operation observed it and bailed out). Never delivered.
    """

    kind: Literal["value", "error", "cancelled"]
    value: V | None = None
    error: BaseException | None = None

    @staticmethod
    def Value(value: Any) -> Outcome[Any]:
        return Outcome(kind="value", value=value)

    @staticmethod
    def Error(error: BaseException) -> Outcome[Any]:
        return Outcome(kind="error", error=error)

    @staticmethod
    def Cancelled() -> Outcome[Any]:
        return Outcome(kind="cancelled")

    @property
    def is_value(self) -> bool:
        return self.kind == "value"

    @property
    def is_error(self) -> bool:
        return self.kind == "error"

    @property
    def is_cancelled(self) -> bool:
        return self.kind == "cancelled"

    def _require_error(self) -> BaseException:
        if self.error is None:
            raise ValueError("Outcome has no error.")
        return self.error
