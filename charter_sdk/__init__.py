"""
Charter SDK — client for the Charter validation gateway.
"""

from charter_sdk.client import CharterClient
from charter_sdk.models import DocumentResult, ValidationResult

__all__ = ["CharterClient", "DocumentResult", "ValidationResult"]
