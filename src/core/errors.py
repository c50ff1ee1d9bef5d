class BookInvariantError(RuntimeError):
    """Raised when the order index and the price levels disagree."""


class MalformedEventError(ValueError):
    """Raised when an input row cannot be decoded into a BookEvent."""

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}")
