"""
Error taxonomy for the apigen generator.

Every error raised while extracting, parsing or synthesizing is fatal for the
run: the CLI reports it and exits non-zero. Declarations that are simply not
annotated are not errors; they are skipped with a logged notice.
"""


class ApigenError(Exception):
    """Base class for generation-time failures."""

    def __init__(self, message: str, lineno: int = None):
        self.message = message
        self.lineno = lineno
        super().__init__(message)

    def __str__(self) -> str:
        if self.lineno is not None:
            return f"line {self.lineno}: {self.message}"
        return self.message


class MalformedInputError(ApigenError):
    """The input document cannot be turned into records and actions."""


class UnsupportedFieldTypeError(ApigenError):
    """A record field is declared with a type other than str or int."""


class MalformedDirectiveError(ApigenError):
    """A validation directive does not follow the apivalidator grammar."""


class MalformedRouteError(ApigenError):
    """A routing directive is not a JSON object with a usable url."""


class DuplicateRouteError(ApigenError):
    """Two actions of the same model register the same url."""
