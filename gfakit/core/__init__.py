from .errors import (
    GFAKitError,
    ParseFieldError,
    UintIdError,
    Utf8Error,
    ParseFromStringError,
    OrientationError,
    MissingFieldsError,
    InvalidFieldError,
    InvalidTagTypeError,
    ParseError,
    EmptyLineError,
    UnknownLineTypeError,
    InvalidLineError,
    InvalidFieldLineError,
    GFAIOError,
)
from .models import Orientation

__all__ = [
    "GFAKitError",
    "ParseFieldError",
    "UintIdError",
    "Utf8Error",
    "ParseFromStringError",
    "OrientationError",
    "MissingFieldsError",
    "InvalidFieldError",
    "InvalidTagTypeError",
    "ParseError",
    "EmptyLineError",
    "UnknownLineTypeError",
    "InvalidLineError",
    "InvalidFieldLineError",
    "GFAIOError",
    "Orientation",
]
