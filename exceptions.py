class ConfigurationError(ValueError):
    """Raised when scoring parameters are missing or malformed."""


class InvalidInputError(ValueError):
    """Raised when a numeric input is outside the domain a function accepts."""
