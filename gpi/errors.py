# gpi/errors.py


class DataUnavailable(Exception):
    """A data source could not be read, or produced no usable rows."""


class JoinMiss(LookupError):
    """A country name has no counterpart in the other vocabulary."""

    def __init__(self, name):
        super().__init__(name)
        self.name = name
