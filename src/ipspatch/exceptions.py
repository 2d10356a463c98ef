#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
IPS Patcher - Consolidated Exception Classes

All exception classes used by the package live here so that the core,
the file layer and the command line share one error vocabulary.
"""

from datetime import datetime
from typing import Dict, Any, Optional


class BaseError(Exception):
    """Base class for all project-specific errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code or "ERROR"
        self.details = details or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Converts the exception to a dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': str(self),
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


# =====================================================================================================
# Configuration -related errors
# =====================================================================================================

class ConfigurationError(BaseError):
    """Raised when a configuration file cannot be read or validated."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        config_details = details or {}
        if file_path:
            config_details['file_path'] = str(file_path)
        super().__init__(message, "CONFIG_ERROR", config_details)


# =====================================================================================================
# Patch -related errors
# =====================================================================================================

class PatchError(BaseError):
    """Base class for errors raised while applying a patch."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code or "PATCH_ERROR", details)


class PreconditionError(PatchError):
    """Raised when a stream lacks a capability the patcher needs."""

    def __init__(self, message: str, capability: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        pre_details = details or {}
        if capability:
            pre_details['capability'] = capability
        super().__init__(message, "PRECONDITION_ERROR", pre_details)


class FormatError(PatchError):
    """Raised when the header or trailer magic does not match."""

    def __init__(self, message: str, position: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        fmt_details = details or {}
        if position is not None:
            fmt_details['position'] = position
        super().__init__(message, "FORMAT_ERROR", fmt_details)


class TruncatedStreamError(PatchError):
    """Raised when the patch ends before a record is complete."""

    def __init__(self, message: str, expected: Optional[int] = None,
                 received: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        trunc_details = details or {}
        if expected is not None:
            trunc_details['expected'] = expected
        if received is not None:
            trunc_details['received'] = received
        super().__init__(message, "TRUNCATED_STREAM", trunc_details)
