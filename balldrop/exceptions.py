"""Custom exceptions for the ball drop simulator."""


class BallDropError(Exception):
    """Base exception for all ball drop simulator errors."""

    pass


class InvalidArgumentError(BallDropError, ValueError):
    """A parameter was outside the range the operation accepts."""

    def __init__(self, message: str = "Invalid argument") -> None:
        self.message = message
        super().__init__(self.message)


class OutOfBoundsError(BallDropError, ValueError):
    """A coordinate fell outside the physical field of the viewport."""

    def __init__(self, message: str = "Coordinate is out of bounds") -> None:
        self.message = message
        super().__init__(self.message)
