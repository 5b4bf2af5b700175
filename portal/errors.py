"""
Portal Errors

AuthError        - no/invalid session, handled by redirecting to the landing page
ValidationError  - missing or malformed event request fields
StoreError       - data store failure (query/insert/delete, network)
PermissionDenied - mutation outside the ownership/status rule
"""
from typing import List, Optional


class PortalError(Exception):
    """Base error, `message` is shown to the member as-is"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(PortalError):
    pass


class ValidationError(PortalError):
    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class StoreError(PortalError):
    pass


class PermissionDenied(PortalError):
    pass
