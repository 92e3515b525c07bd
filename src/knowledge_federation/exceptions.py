"""Custom exception hierarchy for the knowledge federation engine."""


class FederationError(Exception):
    """Base exception for all federation engine errors."""


class AdapterError(FederationError):
    """A single source adapter failed to answer a search."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class FanOutTimeout(FederationError):
    """The fan-out deadline elapsed before every adapter answered."""


class QueryCancelled(FederationError):
    """An in-flight query was superseded and its results discarded."""


class GenerationError(FederationError):
    """Error from the external text-generation step."""


class PersistenceError(FederationError):
    """Error reading or writing conversation sessions."""


class SessionNotFoundError(PersistenceError):
    """No session exists with the requested id."""


class SessionDeletedError(PersistenceError):
    """The session was deleted; no further operations are permitted."""


class ConfigurationError(FederationError):
    """Error in system configuration."""
