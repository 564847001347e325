"""
Exceptions raised by the scheduler and its persistence layer.
"""


class InvalidReviewError(ValueError):
    """Malformed scheduler input. Indicates a bug in the caller."""


class PersistenceError(RuntimeError):
    """The card store could not complete a read or write."""


class ConcurrentUpdateError(PersistenceError):
    """Another writer updated the card between our read and our write."""

    def __init__(self, card_id: str, message: str = ""):
        self.card_id = card_id
        super().__init__(message or f"Card {card_id!r} was modified concurrently")
