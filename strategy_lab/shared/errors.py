"""Exceptions shared by the pipeline stages."""


class ConfigurationError(ValueError):
    """Raised before any simulation runs when a parameter is structurally invalid."""

    def __init__(self, parameter: str, message: str):
        self.parameter = parameter
        self.message = message
        super().__init__(f"{parameter}: {message}")


def require_positive_int(parameter: str, value) -> int:
    """Validate a day count / size parameter (int >= 1)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(parameter, f"must be an integer, got {value!r}")
    if value < 1:
        raise ConfigurationError(parameter, f"must be >= 1, got {value}")
    return value


def require_non_negative(parameter: str, value) -> float:
    """Validate a ratio / percentage parameter (number >= 0)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(parameter, f"must be a number, got {value!r}")
    if value < 0:
        raise ConfigurationError(parameter, f"must be >= 0, got {value}")
    return float(value)
