"""Exception types raised by the reliability analysis."""


class ReliabilityError(Exception):
    """Base class for reliability analysis failures."""


class ConfigurationError(ReliabilityError, ValueError):
    """Reliability parameters or a flow shape make the requested computation undefined."""


class NonConvergenceError(ReliabilityError, RuntimeError):
    """The transmission-budget loop hit its time-slot cap before reaching the e2e target."""


class TableShapeError(ReliabilityError, ValueError):
    """A reliability row does not match the table's fixed column layout."""
