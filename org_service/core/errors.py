"""
Typed errors raised by the catalog, resolver and coordinator.

Each error carries a stable ``code`` that callers branch on (for example
``USER_NOT_FOUND`` or ``ORGANIZATION_USER_REQUIRED``). The HTTP binding in
``org_service.api.errors`` maps them onto status codes.
"""

from typing import Optional


class MembershipError(Exception):
    """Base class for every error raised by the membership core"""

    status_code = 500
    title = "Internal Server Error"

    def __init__(self, code: str, detail: Optional[str] = None):
        self.code = code
        self.detail = detail or code
        super().__init__(self.detail)

    def __repr__(self):
        return f"<{self.__class__.__name__}(code={self.code})>"


class ValidationError(MembershipError):
    """Malformed input: empty names, unknown roles, mismatched team and organization"""

    status_code = 400
    title = "Bad Request"


class NotFound(MembershipError):
    """A referenced organization, team or user does not exist"""

    status_code = 404
    title = "Not Found"


class Unauthorized(MembershipError):
    """The caller lacks the role required for the operation"""

    status_code = 403
    title = "Forbidden"


class ConflictInternal(MembershipError):
    """Storage failure during a multi-step write"""

    status_code = 500
    title = "Internal Server Error"
