"""Exceptions raised by the gym-tracker core."""


class GymTrackerError(Exception):
    """Base class for all gym-tracker errors."""


class ValidationError(GymTrackerError, ValueError):
    """Input rejected before any state was changed."""


class InvalidStateError(GymTrackerError):
    """Operation not allowed in the current state."""


class NotFoundError(GymTrackerError, LookupError):
    """Referenced exercise, set, workout or program does not exist."""


class PersistenceError(GymTrackerError):
    """The object store failed to commit or load."""
