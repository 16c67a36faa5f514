"""Domain-level exceptions."""


class InvalidTransitionError(ValueError):
    """A job record was asked to move backward or out of a terminal status."""

    pass
