"""fortstats - team-fortress server log parsing and match statistics."""

__version__ = "0.1.0"
