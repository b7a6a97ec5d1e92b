"""
Errors raised by the pricing layer.
"""


class PricingAPIError(Exception):
    """Raised when the remote price catalog cannot be queried."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class UnsupportedResourceError(Exception):
    """Raised when no calculator handles a resource type."""

    def __init__(self, resource_type: str):
        super().__init__(f"Resource type {resource_type} is not supported")
        self.resource_type = resource_type
