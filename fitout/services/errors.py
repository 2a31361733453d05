"""Pattern store exceptions.

Only write-time failures are exceptions. Resolution never raises for user
text; a miss is an empty candidate list.
"""


class PatternError(Exception):
    """Base class for pattern store failures."""


class PatternValidationError(PatternError):
    """A custom pattern is malformed (missing fields, bad enum, bad regex)."""


class PatternPermissionError(PatternError):
    """A write targeted a core pattern."""


class PatternConflictError(PatternError):
    """A create collided with an existing pattern id."""


class PatternNotFoundError(PatternError):
    """No user pattern exists with the given id."""
