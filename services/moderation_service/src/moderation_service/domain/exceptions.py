from __future__ import annotations


class ModerationError(Exception):
    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class AuditStoreError(ModerationError):
    def __init__(self, detail: str) -> None:
        super().__init__(
            message=f"Audit store operation failed: {detail}",
            error_code="AUDIT_STORE_ERROR",
        )

