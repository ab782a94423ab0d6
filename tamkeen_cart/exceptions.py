"""Exceptions raised by the storefront cart library."""

from decimal import Decimal
from typing import Optional


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str = "An internal error occurred") -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(StorefrontError):
    """Raised when a configuration value cannot be parsed."""


class ValidationError(StorefrontError):
    """Raised for rejected user input such as a negative quantity."""


class EmptyCartError(ValidationError):
    """Raised when checking out with no lines."""

    def __init__(self, message: str = "Your cart is empty") -> None:
        super().__init__(message)


class AuthenticationRequiredError(StorefrontError):
    """Raised when checkout is attempted by an unauthenticated user."""

    def __init__(self, message: str = "Must be authenticated to check out") -> None:
        super().__init__(message)


class CouponError(StorefrontError):
    """Base class for coupon validation failures."""


class CouponNotFoundError(CouponError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Coupon code '{code}' is not valid")
        self.code = code


class MinimumNotMetError(CouponError):
    """Raised when the subtotal is below the coupon's minimum purchase."""

    def __init__(self, code: str, required: Decimal) -> None:
        super().__init__(f"Coupon '{code}' requires a minimum purchase of ${required:.2f}")
        self.code = code
        self.required = required


class PersistenceError(StorefrontError):
    """Raised when durable storage cannot be read or written."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class NetworkError(StorefrontError):
    """Raised when a remote endpoint cannot be reached or returns garbage."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url
