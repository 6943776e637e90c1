"""Quest script & battle rules engine core (DB 무관)"""

__version__ = "0.1.0"
