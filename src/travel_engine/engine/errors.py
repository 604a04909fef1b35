"""Engine error taxonomy. All failures are local and non-retryable."""


class EngineError(ValueError):
    """Base class for engine validation failures."""


class NotFound(EngineError):
    """Unknown entity, catalog or user reference."""


class InvalidArgument(EngineError):
    """Malformed input such as a missing id or a bad redemption amount."""


class InsufficientBalance(EngineError):
    """Redemption exceeds the active points balance."""
