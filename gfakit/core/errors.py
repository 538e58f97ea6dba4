"""
Error types raised while parsing GFA, PAF and GAF records.

Field-level errors (ParseFieldError and subclasses) are attributable to a
single column. Line-level errors (ParseError and subclasses) wrap a field
error together with the offending line, or describe a problem with the
line as a whole. Only EmptyLineError and UnknownLineTypeError are
recoverable; a stream driver skips those and stops on anything else.
"""
from typing import Optional, Union


class GFAKitError(Exception):
    """Base class for all gfakit errors."""
    pass


class ParseFieldError(GFAKitError):
    """Unknown error when parsing a field."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__doc__)


class UintIdError(ParseFieldError):
    """Failed to parse a segment ID as an unsigned integer"""


class Utf8Error(ParseFieldError):
    """Failed to parse a bytestring as a UTF-8 string"""


class ParseFromStringError(ParseFieldError):
    """Failed to parse a field from a string"""


class OrientationError(ParseFieldError):
    """Failed to parse an orientation character"""


class MissingFieldsError(ParseFieldError):
    """Line is missing required fields"""


class InvalidFieldError(ParseFieldError):
    """A required field was incorrectly formatted."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        text = f"Failed to parse field `{field}`"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class InvalidTagTypeError(ParseFieldError):
    """
    An optional field used a type character outside of `AifZJHB`.

    The set of tag types is closed, so this is a defect in the input
    rather than a tag the caller merely does not know about.
    """

    def __init__(self, type_char: Union[bytes, str]):
        if isinstance(type_char, bytes):
            type_char = type_char.decode("ascii", errors="replace")
        self.type_char = type_char
        super().__init__(f"Invalid optional field type `{type_char}`")


class ParseError(GFAKitError):
    """Unknown error when parsing a line"""

    can_safely_continue = False

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__doc__)

    def break_if_necessary(self) -> None:
        """Re-raise this error unless a stream driver may skip it."""
        if not self.can_safely_continue:
            raise self


class EmptyLineError(ParseError):
    """Line was empty"""

    can_safely_continue = True


class UnknownLineTypeError(ParseError):
    """Line type was not one of 'H', 'S', 'L', 'C', 'P'"""

    can_safely_continue = True

    def __init__(self, line_type: bytes = b""):
        self.line_type = line_type
        super().__init__()


class InvalidLineError(ParseError):
    """A line could not be parsed; keeps the field error and the raw line."""

    def __init__(self, field_error: ParseFieldError, line: str, line_number: Optional[int] = None):
        self.field_error = field_error
        self.line = line
        self.line_number = line_number
        if line_number is not None:
            message = f"Failed to parse line {line_number} ({line}), error: {field_error}"
        else:
            message = f"Failed to parse line {line}, error: {field_error}"
        super().__init__(message)

    @classmethod
    def from_field_error(cls, error: ParseFieldError, line: Union[bytes, str],
                         line_number: Optional[int] = None) -> 'InvalidLineError':
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        return cls(error, line, line_number)


class InvalidFieldLineError(ParseError):
    """A field failed to parse outside of any line context."""

    def __init__(self, field_error: ParseFieldError):
        self.field_error = field_error
        super().__init__(f"Failed to parse field: {field_error}")


class GFAIOError(ParseError):
    """Wrapper for an I/O error raised while reading records."""

    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"IO error: {path}: {cause}")
