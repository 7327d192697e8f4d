"""FinCoach: financial health scoring and coaching insights."""

__version__ = "0.1.0"
