#!/usr/bin/env python3
"""
Exception hierarchy for the CATH domain splitter.
All custom exceptions should inherit from CATHError.
"""
from typing import Dict, Any, Optional


class CATHError(Exception):
    """Base exception for all CATH-related errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize with error message and optional details

        Args:
            message: Error message
            details: Optional details dictionary with context
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(CATHError):
    """Error related to configuration issues"""
    pass


class FetchError(CATHError):
    """Boundary source could not be retrieved"""
    pass


class ParseError(CATHError):
    """Malformed boundary line or range token"""
    pass


class ValidationError(CATHError):
    """Builder capacity or structural consistency violation"""
    pass


class FileOperationError(CATHError):
    """Error during file operations"""
    pass
