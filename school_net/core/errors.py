"""Exceptions raised by the simulation core."""


class SimulationError(Exception):
    """Base class for all simulation errors."""


class ConfigurationError(SimulationError, ValueError):
    """Raised at startup when the scenario is wired or parameterized wrongly."""


class SchedulingError(SimulationError):
    """Raised on misuse of the event scheduler."""


class DeliveryError(SimulationError):
    """Raised when traffic is delivered to a class with no matching sink."""
