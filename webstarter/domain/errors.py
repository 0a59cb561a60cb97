"""
Errors raised by the response layer itself.

Handler code raises whatever it likes; those exceptions are faults and
go to the panic resolver. The classes here mark failures that originate
inside the framework and are safe to show to the panic resolver even
when panic details are hidden.
"""


class StarterError(Exception):
    """Base error for all framework errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ResponseDecodeError(StarterError):
    """Raised when a structured response payload cannot be encoded."""

    def __init__(self, value_type: str, reason: str) -> None:
        super().__init__(f"Cannot encode response payload of type {value_type}: {reason}")
        self.value_type = value_type
        self.reason = reason


class ConfigurationError(StarterError):
    """Raised when routers, middlewares or settings are wired incorrectly."""


class ServerStartError(StarterError):
    """Raised when the HTTP listener does not come up."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"Server failed to listen at {address}: {reason}")
        self.address = address
        self.reason = reason
