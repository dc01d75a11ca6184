"""
Typed success/failure results for use cases that report errors as data.
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ActionError:
    code: str
    message: str


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Outcome of a use case: either ``data`` or an ``error``, never both."""

    success: bool
    data: Optional[T] = None
    error: Optional[ActionError] = None

    @classmethod
    def ok(cls, data: T) -> "ActionResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: Any, message: str) -> "ActionResult[T]":
        code_value = getattr(code, "value", code)
        return cls(success=False, error=ActionError(code=str(code_value), message=message))

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {
            "success": False,
            "error": {"code": self.error.code, "message": self.error.message},
        }
