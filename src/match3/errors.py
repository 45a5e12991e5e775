"""Exception types raised by the match-3 engine.

Expected swap rejections (not adjacent, busy, no match) are reported as
``SwapOutcome`` values instead; see ``match3.outcomes``.
"""


class Match3Error(Exception):
    """Base class for engine errors."""


class OutOfBounds(Match3Error, IndexError):
    def __init__(self, row: int, col: int, rows: int, cols: int):
        super().__init__(f"cell ({row}, {col}) outside {rows}x{cols} board")
        self.row = row
        self.col = col


class InvalidConfiguration(Match3Error, ValueError):
    pass


class CascadeDidNotConverge(Match3Error, RuntimeError):
    def __init__(self, steps: int):
        super().__init__(f"cascade still matching after {steps} steps")
        self.steps = steps
