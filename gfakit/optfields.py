"""
Optional fields ("tags") attached to GFA, PAF and GAF records.

Every trailing column of a record is a `TAG:TYPE:VALUE` triplet, where TAG
is two characters and TYPE is one of `A`, `i`, `f`, `Z`, `J`, `H` or `B`.
Records are generic over a capture policy (a subclass of OptFields):
NoTags validates the columns and keeps nothing, OptionalFields keeps every
tag in input order.
"""
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Type

from gfakit.core.errors import (
    InvalidFieldError,
    InvalidTagTypeError,
    ParseFromStringError,
)
from gfakit.core.io import BytesLike, as_bytes

_TAG_RE = re.compile(rb"[A-Za-z][A-Za-z0-9]")
_CHAR_RE = re.compile(rb"[!-~]")
_INT_RE = re.compile(rb"[-+]?[0-9]+")
_FLOAT_RE = re.compile(rb"[-+]?[0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?")
_STRING_RE = re.compile(rb"[ !-~]+")
_HEX_RE = re.compile(rb"(?:[0-9A-Fa-f]{2})+")

INT64_RANGE = (-2 ** 63, 2 ** 63 - 1)

# Element ranges of the integer sub-types of `B` arrays
INT_ARRAY_RANGES = {
    "c": (-2 ** 7, 2 ** 7 - 1),
    "C": (0, 2 ** 8 - 1),
    "s": (-2 ** 15, 2 ** 15 - 1),
    "S": (0, 2 ** 16 - 1),
    "i": (-2 ** 31, 2 ** 31 - 1),
    "I": (0, 2 ** 32 - 1),
}


class OptFieldKind(Enum):
    """Value variants of an optional field, keyed by their type character."""
    CHAR = "A"
    INT = "i"
    FLOAT = "f"
    STRING = "Z"
    JSON = "J"
    BYTES = "H"
    INT_ARRAY = "B"
    FLOAT_ARRAY = "Bf"

    @property
    def type_char(self) -> str:
        return self.value[0]


def _parse_int(raw: bytes, bounds: Tuple[int, int] = INT64_RANGE) -> int:
    if not _INT_RE.fullmatch(raw):
        raise ParseFromStringError(f"Not an integer: {raw!r}")
    value = int(raw)
    low, high = bounds
    if not low <= value <= high:
        raise ParseFromStringError(f"Integer out of range [{low}, {high}]: {raw!r}")
    return value


def _check_finite(value: float) -> None:
    # `f` values have no text form for inf or nan
    if not math.isfinite(value):
        raise ValueError(f"Optional field floats must be finite, got {value}")


def _parse_float(raw: bytes) -> float:
    if not _FLOAT_RE.fullmatch(raw):
        raise ParseFromStringError(f"Not a floating point number: {raw!r}")
    value = float(raw)
    if not math.isfinite(value):
        raise ParseFromStringError(f"Floating point number out of range: {raw!r}")
    return value


@dataclass(frozen=True)
class OptFieldVal:
    """
    The typed value of an optional field.

    Attributes:
        kind: Which of the eight variants this is
        value: bytes for A/Z/J/H, int for i, float for f, a tuple of
               numbers for B arrays
        subtype: Element type of an integer array (one of `cCsSiI`)
    """
    kind: OptFieldKind
    value: Any
    subtype: Optional[str] = None

    @classmethod
    def char(cls, value: BytesLike) -> 'OptFieldVal':
        return cls(OptFieldKind.CHAR, as_bytes(value))

    @classmethod
    def integer(cls, value: int) -> 'OptFieldVal':
        return cls(OptFieldKind.INT, value)

    @classmethod
    def floating(cls, value: float) -> 'OptFieldVal':
        _check_finite(value)
        return cls(OptFieldKind.FLOAT, value)

    @classmethod
    def string(cls, value: BytesLike) -> 'OptFieldVal':
        return cls(OptFieldKind.STRING, as_bytes(value))

    @classmethod
    def json(cls, value: BytesLike) -> 'OptFieldVal':
        return cls(OptFieldKind.JSON, as_bytes(value))

    @classmethod
    def hex_bytes(cls, value: BytesLike) -> 'OptFieldVal':
        return cls(OptFieldKind.BYTES, as_bytes(value))

    @classmethod
    def int_array(cls, values: Iterable[int], subtype: str = "i") -> 'OptFieldVal':
        if subtype not in INT_ARRAY_RANGES:
            raise ValueError(f"Invalid integer array subtype: {subtype}")
        return cls(OptFieldKind.INT_ARRAY, tuple(values), subtype)

    @classmethod
    def float_array(cls, values: Iterable[float]) -> 'OptFieldVal':
        values = tuple(values)
        for value in values:
            _check_finite(value)
        return cls(OptFieldKind.FLOAT_ARRAY, values, "f")

    @classmethod
    def parse(cls, type_char: BytesLike, raw: BytesLike) -> 'OptFieldVal':
        """
        Parse the value part of an optional field.

        Args:
            type_char: One of `A`, `i`, `f`, `Z`, `J`, `H`, `B`
            raw: The value text following the second colon

        Returns:
            The decoded value

        Raises:
            InvalidTagTypeError: If the type character is not one of the seven
            InvalidFieldError: If a textual payload is malformed
            ParseFromStringError: If a numeric payload is malformed
        """
        type_char = as_bytes(type_char)
        raw = as_bytes(raw)

        if type_char == b"A":
            if not _CHAR_RE.fullmatch(raw):
                raise InvalidFieldError("optional field", f"expected one printable character, got {raw!r}")
            return cls.char(raw)
        elif type_char == b"i":
            return cls.integer(_parse_int(raw))
        elif type_char == b"f":
            return cls.floating(_parse_float(raw))
        elif type_char == b"Z":
            if not _STRING_RE.fullmatch(raw):
                raise InvalidFieldError("optional field", f"expected a printable string, got {raw!r}")
            return cls.string(raw)
        elif type_char == b"J":
            if not _STRING_RE.fullmatch(raw):
                raise InvalidFieldError("optional field", f"expected a JSON string, got {raw!r}")
            return cls.json(raw)
        elif type_char == b"H":
            if not _HEX_RE.fullmatch(raw):
                raise InvalidFieldError("optional field", f"expected pairs of hex digits, got {raw!r}")
            return cls.hex_bytes(bytes.fromhex(raw.decode("ascii")))
        elif type_char == b"B":
            return cls._parse_array(raw)
        raise InvalidTagTypeError(type_char)

    @classmethod
    def _parse_array(cls, raw: bytes) -> 'OptFieldVal':
        if not raw:
            raise InvalidFieldError("optional field", "empty array")
        subtype = raw[:1].decode("ascii", errors="replace")
        rest = raw[1:]
        if rest and not rest.startswith(b","):
            raise InvalidFieldError("optional field", f"malformed array {raw!r}")
        elements = rest[1:].split(b",") if rest else []

        if subtype == "f":
            return cls.float_array(_parse_float(e) for e in elements)
        if subtype in INT_ARRAY_RANGES:
            bounds = INT_ARRAY_RANGES[subtype]
            return cls.int_array((_parse_int(e, bounds) for e in elements), subtype)
        raise InvalidFieldError("optional field", f"invalid array subtype {subtype!r}")

    @property
    def type_char(self) -> str:
        return self.kind.type_char

    def to_bytes(self) -> bytes:
        """Encode the value as it appears after `TAG:TYPE:`."""
        kind = self.kind
        if kind in (OptFieldKind.CHAR, OptFieldKind.STRING, OptFieldKind.JSON):
            return self.value
        if kind is OptFieldKind.INT:
            return str(self.value).encode("ascii")
        if kind is OptFieldKind.FLOAT:
            return repr(float(self.value)).encode("ascii")
        if kind is OptFieldKind.BYTES:
            return self.value.hex().upper().encode("ascii")
        if kind is OptFieldKind.INT_ARRAY:
            elements = [str(v).encode("ascii") for v in self.value]
        else:
            elements = [repr(float(v)).encode("ascii") for v in self.value]
        return b",".join([self.subtype.encode("ascii")] + elements)


@dataclass(frozen=True)
class OptField:
    """A two-character tag and its typed value."""
    tag: bytes
    value: OptFieldVal

    @classmethod
    def new(cls, tag: BytesLike, value: OptFieldVal) -> 'OptField':
        tag = as_bytes(tag)
        if not _TAG_RE.fullmatch(tag):
            raise InvalidFieldError("optional field", f"invalid tag name {tag!r}")
        return cls(tag, value)

    @classmethod
    def parse(cls, field: BytesLike) -> 'OptField':
        """Parse one `TAG:TYPE:VALUE` column."""
        field = as_bytes(field)
        parts = field.split(b":", 2)
        if len(parts) != 3:
            raise InvalidFieldError("optional field", f"expected TAG:TYPE:VALUE, got {field!r}")
        tag, type_char, raw = parts
        if len(type_char) != 1:
            raise InvalidTagTypeError(type_char)
        return cls.new(tag, OptFieldVal.parse(type_char, raw))

    def to_bytes(self) -> bytes:
        return b":".join([self.tag, self.value.type_char.encode("ascii"), self.value.to_bytes()])

    def __bytes__(self) -> bytes:
        return self.to_bytes()


class OptFields:
    """
    Capture policy for the optional columns of a record.

    Record parsers call `parse` with the trailing columns; subclasses
    decide what, if anything, is kept.
    """

    @classmethod
    def parse(cls, fields: Iterable[BytesLike]) -> 'OptFields':
        raise NotImplementedError

    def get_field(self, tag: BytesLike) -> Optional[OptField]:
        raise NotImplementedError

    def fields(self) -> List[OptField]:
        raise NotImplementedError

    def copy(self) -> 'OptFields':
        """A copy that can be modified without affecting this one."""
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        """Tab-joined encoding of the kept tags (empty when none)."""
        return b"\t".join(f.to_bytes() for f in self.fields())


class NoTags(OptFields):
    """Validates every optional column but keeps none of them."""

    __slots__ = ()

    @classmethod
    def parse(cls, fields: Iterable[BytesLike]) -> 'NoTags':
        for field in fields:
            OptField.parse(field)
        return NO_TAGS

    def get_field(self, tag: BytesLike) -> Optional[OptField]:
        return None

    def fields(self) -> List[OptField]:
        return []

    def copy(self) -> 'NoTags':
        return self

    def to_bytes(self) -> bytes:
        return b""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoTags)

    def __hash__(self) -> int:
        return hash(NoTags)

    def __repr__(self) -> str:
        return "NoTags()"


NO_TAGS = NoTags()


class OptionalFields(OptFields):
    """
    Every optional field of a record, in input order.

    Tag names are not required to be unique; lookups and removals act on
    the first field with a matching tag.
    """

    def __init__(self, fields: Optional[Iterable[OptField]] = None):
        self._fields: List[OptField] = list(fields) if fields is not None else []

    @classmethod
    def parse(cls, fields: Iterable[BytesLike]) -> 'OptionalFields':
        return cls(OptField.parse(field) for field in fields)

    def get_field(self, tag: BytesLike) -> Optional[OptField]:
        tag = as_bytes(tag)
        for field in self._fields:
            if field.tag == tag:
                return field
        return None

    def remove_field(self, tag: BytesLike) -> Optional[OptFieldVal]:
        """Remove the first field named `tag` and return its value."""
        tag = as_bytes(tag)
        for ix, field in enumerate(self._fields):
            if field.tag == tag:
                del self._fields[ix]
                return field.value
        return None

    def append(self, field: OptField) -> None:
        self._fields.append(field)

    def fields(self) -> List[OptField]:
        return list(self._fields)

    def copy(self) -> 'OptionalFields':
        return OptionalFields(self._fields)

    def __iter__(self) -> Iterator[OptField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OptionalFields):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"OptionalFields({self._fields!r})"


OptFieldsType = Type[OptFields]
