"""Settlement error taxonomy.

Configuration and input errors are ``ValidationError`` subclasses so the API
layer reports them as 400s; they are never retried. Transient carrier failures
are not exceptions at all: they come back as ``GatewayTransportError`` results
and leave the package pending.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class NoCarrierAvailable(ValidationError):
    """No active shipping company is configured."""


class InvalidDestination(ValidationError):
    """The order's destination village is missing, unknown or inactive."""


class PlatformAccountNotConfigured(ValidationError):
    """Platform commission cannot be settled without a platform account."""


class PackageNotFound(ObjectNotFoundError):
    """The order has no package yet."""
