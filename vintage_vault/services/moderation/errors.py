"""
Moderation error taxonomy

ValidationError, NotFoundError, PermissionDeniedError and StoreError reach the
caller as HTTP errors. PatternError and OracleError are recovered where they
occur and only ever show up in logs, warnings and the error tracker.
"""
from vintage_vault.utils.error_handlers import APIError


class ModerationError(APIError):
    """Base class for moderation failures"""


class ValidationError(ModerationError):
    status_code = 400
    error_code = 'VALIDATION_ERROR'


class NotFoundError(ModerationError):
    status_code = 404
    error_code = 'NOT_FOUND'


class PermissionDeniedError(ModerationError):
    status_code = 403
    error_code = 'ADMIN_REQUIRED'


class StoreError(ModerationError):
    status_code = 500
    error_code = 'STORE_ERROR'


class PatternError(ModerationError):
    """A stored pattern does not compile as a regular expression"""

    def __init__(self, message, rule_id=None, pattern=None):
        super().__init__(message, details={'rule_id': rule_id, 'pattern': pattern})
        self.rule_id = rule_id
        self.pattern = pattern


class OracleError(ModerationError):
    """The rewrite service is unreachable, timed out or answered garbage"""
    status_code = 502
    error_code = 'ORACLE_ERROR'
