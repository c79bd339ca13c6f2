"""Exception types raised during optimization setup."""


class ConfigurationError(ValueError):
    """Invalid problem, parameter or method configuration detected before a run."""
