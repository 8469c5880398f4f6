class LocatorSynthesisError(RuntimeError):
    """Base class for locator synthesis failures."""


class InvalidElement(LocatorSynthesisError):
    """Raised when the target is missing or has no tag."""


class OracleSyntaxError(LocatorSynthesisError):
    """Raised when the oracle rejects a malformed expression."""

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(f"Malformed expression {expression!r}: {reason}")
        self.expression = expression
        self.reason = reason


class ValidationFailure(LocatorSynthesisError):
    """Raised when an expression does not resolve to exactly the target."""

    def __init__(self, expression: str, match_count: int) -> None:
        super().__init__(f"Expression {expression!r} matched {match_count} node(s), expected the target only")
        self.expression = expression
        self.match_count = match_count


class NoApplicableStrategy(LocatorSynthesisError):
    """Raised when no strategy accepted the target."""


class AllStrategiesFailed(LocatorSynthesisError):
    """Raised when every applicable strategy came back empty."""


class FallbackFailed(LocatorSynthesisError):
    """Raised when not even a positional path could be built."""
