from enum import Enum
from typing import Optional, Union

from gfakit.core.errors import OrientationError


class Orientation(Enum):
    """Strand of a segment or a step, forward (+) or backward (-)."""
    FORWARD = "+"
    BACKWARD = "-"

    @classmethod
    def default(cls) -> 'Orientation':
        return cls.FORWARD

    @classmethod
    def from_bytes(cls, token: Union[bytes, str]) -> Optional['Orientation']:
        """Map `+`/`-` to an orientation, anything else to None."""
        if isinstance(token, bytes):
            if token == b"+":
                return cls.FORWARD
            if token == b"-":
                return cls.BACKWARD
            return None
        if token == "+":
            return cls.FORWARD
        if token == "-":
            return cls.BACKWARD
        return None

    @classmethod
    def parse(cls, token: Union[bytes, str]) -> 'Orientation':
        orient = cls.from_bytes(token)
        if orient is None:
            raise OrientationError(f"Could not parse orientation (was not + or -): {token!r}")
        return orient

    def is_reverse(self) -> bool:
        return self is Orientation.BACKWARD

    def flip(self) -> 'Orientation':
        return Orientation.BACKWARD if self is Orientation.FORWARD else Orientation.FORWARD

    def __bool__(self) -> bool:
        return self is Orientation.FORWARD

    def __str__(self) -> str:
        return self.value

    def __bytes__(self) -> bytes:
        return self.value.encode("ascii")
