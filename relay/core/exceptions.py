"""Custom exceptions for Imposter Relay."""


class RelayException(Exception):
    """Base exception for all relay errors."""
    
    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)
    
    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidActionError(RelayException):
    """Raised when the reducer is handed something that is not an action."""
    
    pass


class InvalidStateError(RelayException):
    """Raised when the session state is invalid or inconsistent."""
    
    pass


class ConfigurationError(RelayException):
    """Raised when configuration is invalid."""
    
    pass
