"""Custom exception classes for the JSON-RPC server."""


class RPCServerError(Exception):
    """Base exception for server setup and registry errors."""

    pass


class RegistrationError(RPCServerError, TypeError):
    """A callback, factory or exception kind of the wrong type was registered."""

    pass


class FactoryError(RPCServerError):
    """A namespace factory raised while building its service."""

    def __init__(self, namespace: str, cause: BaseException):
        super().__init__(f"Factory for namespace '{namespace}' failed: {cause}")
        self.namespace = namespace
        self.cause = cause
