"""
Error types raised by the gridmerge pipeline.

Missing inputs are fatal and abort the run. Malformed rows are recovered
locally by the component that reads them.
"""


class GridMergeError(Exception):
    """Base class for all pipeline errors."""


class MissingInputFile(GridMergeError, FileNotFoundError):
    """A source CSV is absent or cannot be opened."""

    def __init__(self, path, what: str = "input file"):
        self.path = str(path)
        self.what = what
        super().__init__(f"Could not open {what}: {self.path}")


class MissingInputDirectory(GridMergeError, FileNotFoundError):
    """The date-named forecast directory does not exist."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Directory does not exist: {self.path}")


class MalformedRow(GridMergeError, ValueError):
    """A data row has a missing, non-numeric or non-finite field."""

    def __init__(self, source=None, line_number=None, reason: str = "malformed row"):
        self.source = None if source is None else str(source)
        self.line_number = line_number
        self.reason = reason
        location = ""
        if self.source is not None:
            location = f" ({self.source}"
            if line_number is not None:
                location += f", line {line_number}"
            location += ")"
        super().__init__(f"{reason}{location}")
