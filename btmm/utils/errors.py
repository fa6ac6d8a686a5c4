"""exceptions raised by the rating engine and its io wrappers"""


class RatingError(Exception):
    """base class for every error raised by btmm"""


class MatchParseError(RatingError, ValueError):
    """a match row could not be turned into a MatchResult"""

    def __init__(self, row_number, row, reason):
        self.row_number = row_number
        self.row = row
        self.reason = reason
        super().__init__(f'row {row_number} {list(row)!r}: {reason}')


class ConfigurationError(RatingError, ValueError):
    """invalid prior or optimizer parameters"""


class ConvergenceError(RatingError, RuntimeError):
    """an iterative computation did not settle within its iteration cap"""

    def __init__(self, message, iterations=None, delta=None):
        self.iterations = iterations
        self.delta = delta
        super().__init__(message)
