"""Custom exceptions for circuit construction and solving."""


class CircuitValidationError(ValueError):
    """Raised when a circuit, component or layout is invalid."""


class CircuitNotSolvableError(RuntimeError):
    """Raised when a circuit cannot be solved for branch currents."""


class IncompleteCircuitError(CircuitNotSolvableError):
    """Raised when no complete current-carrying loop exists."""


class ShortCircuitError(CircuitNotSolvableError):
    """Raised when a battery drives a closed zero-resistance loop."""


class SingularCircuitError(CircuitNotSolvableError):
    """Raised when the Kirchhoff system is singular or ill-conditioned."""
