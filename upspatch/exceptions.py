#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
UPS Patch Toolkit - Consolidated Exception Classes

This module contains all exception classes used in the project,
centralized in one place to avoid duplication and improve consistency.
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
    """Base class for configuration errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        config_details = details or {}
        if file_path:
            config_details['file_path'] = str(file_path)
        super().__init__(message, error_code or "CONFIG_ERROR", config_details)


class ValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 expected_type: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        validation_details = details or {}
        if field_name:
            validation_details['field_name'] = field_name
        if expected_type:
            validation_details['expected_type'] = expected_type
        super().__init__(message, "VALIDATION_ERROR", None, validation_details)


# =====================================================================================================
# IO errors
# =====================================================================================================

class FileOperationError(BaseError):
    """Raised when file operation errors occur."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 operation: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        file_details = details or {}
        if file_path:
            file_details['file_path'] = str(file_path)
        if operation:
            file_details['operation'] = operation
        super().__init__(message, "FILE_OP_ERROR", file_details)


# =====================================================================================================
# Patch errors
# =====================================================================================================

class PatchError(BaseError):
    """Base class for errors while building, parsing or applying patches."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 offset: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        patch_details = details or {}
        if offset is not None:
            patch_details['offset'] = offset
        super().__init__(message, error_code or "PATCH_ERROR", patch_details)
        self.offset = offset


class PatchFormatError(PatchError):
    """Structural corruption of a patch file. Always fatal."""


class BadSignatureError(PatchFormatError):
    """Raised when a patch does not start with the UPS1 signature."""

    def __init__(self, message: str, signature: Optional[bytes] = None,
                 details: Optional[Dict[str, Any]] = None):
        sig_details = details or {}
        if signature is not None:
            sig_details['signature'] = signature.hex()
        super().__init__(message, "BAD_SIGNATURE", 0, sig_details)


class TruncatedPatchError(PatchFormatError):
    """Raised when a patch ends before a required field."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "TRUNCATED_PATCH", offset, details)


class MalformedBlockError(PatchFormatError):
    """Raised when an XOR run is empty or never terminates."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "MALFORMED_BLOCK", offset, details)


class MalformedVarIntError(PatchFormatError):
    """Raised when a variable-length integer has no terminating group."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "MALFORMED_VARINT", offset, details)


class PatchChecksumError(PatchFormatError):
    """Raised when the stored patch CRC32 does not match the patch bytes."""

    def __init__(self, message: str, expected: Optional[int] = None,
                 actual: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        crc_details = details or {}
        if expected is not None:
            crc_details['expected_crc'] = "%08X" % expected
        if actual is not None:
            crc_details['actual_crc'] = "%08X" % actual
        super().__init__(message, "PATCH_CHECKSUM", None, crc_details)


class ChecksumMismatchError(PatchError):
    """Raised when the supplied file is neither the original nor the modified file."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CHECKSUM_MISMATCH", None, details)


class OutputVerificationError(PatchError):
    """Raised when a reconstructed file fails its checksum.

    The untrusted output is kept on the exception so callers can decide
    what to do with it.
    """

    def __init__(self, message: str, output: bytes = b"",
                 direction: Any = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "OUTPUT_VERIFICATION", None, details)
        self.output = output
        self.direction = direction


class BuildError(PatchError):
    """Raised when a patch cannot be built from the given inputs."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "BUILD_ERROR", None, details)
