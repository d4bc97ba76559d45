"""
Shared error handling package.

Centralizes fault classification and error-to-HTTP mapping so that
every failed request gets the same canonical JSON body.
"""

from faultline.shared.errors.codes import ErrorCode
from faultline.shared.errors.faults import AppError, FaultKind, is_operational

__all__ = ["AppError", "ErrorCode", "FaultKind", "is_operational"]
