"""
Custom exceptions for the stats engine with user-friendly error messages.
"""

class StatsException(Exception):
    """Base exception for stats-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class StatsUnavailableError(StatsException):
    """Raised when the rankings cache has not been populated yet."""
    def __init__(self):
        super().__init__(
            "Stats cache is not populated yet",
            "Please wait, stats are still loading..."
        )

class PlayerNotFoundError(StatsException):
    """Raised when no identity resolved to a record in any mode."""
    def __init__(self, names, explicit: bool = False):
        self.names = list(names)
        if explicit:
            user_message = f"Unable to find {self.names[0]}."
        else:
            user_message = f"Unable to find {_join_names(self.names)}, please provide username explicitly."
        super().__init__(f"No stats found for {self.names}", user_message)

class StoreReadError(StatsException):
    """Raised when a read against the score store fails."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Store read failed during {operation}: {details}",
            "Stats are temporarily unavailable. Please try again later."
        )
        self.operation = operation


def _join_names(names):
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " or " + names[-1]
