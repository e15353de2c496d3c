"""Exceptions raised by the calculator engine and its lookups."""


class IpoCalcError(Exception):
    """Base class for calculator errors."""


class StockNotFoundError(IpoCalcError):
    """Raised when an identifier matches no stock record."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"No matching instrument for code {code!r}")


class InvalidInputError(IpoCalcError):
    """Raised when calculator inputs cannot produce a report.

    Attributes:
        fields: Names of the offending fields
    """

    def __init__(self, fields: list[str], message: str | None = None):
        self.fields = list(fields)
        if message is None:
            message = "Invalid calculator input: " + ", ".join(self.fields)
        super().__init__(message)


class UnknownFieldError(IpoCalcError):
    """Raised when editing a name that is not a calculator field."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown calculator field: {name}")
