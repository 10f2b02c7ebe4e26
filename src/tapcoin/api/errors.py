from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from tapcoin.runtime.errors import ApplyError

# ApplyError.code -> HTTP status. Anything unlisted is a caller error (400).
_APPLY_STATUS: Dict[str, int] = {
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
    "domain_error": 500,
}


@dataclass
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    def to_json(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "error": {"code": self.code, "message": self.message, "details": self.details},
        }

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def forbidden(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(403, code, message, details or {})

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def conflict(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(409, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})

    @staticmethod
    def from_apply_error(e: ApplyError) -> "ApiError":
        """Surface the specific reason as error.code; the class goes in message."""
        details = e.details if isinstance(e.details, dict) else ({} if e.details is None else {"details": e.details})
        return ApiError(_APPLY_STATUS.get(e.code, 400), str(e.reason), str(e.code), dict(details))
