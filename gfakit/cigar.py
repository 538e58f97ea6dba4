"""
CIGAR strings: run-length encoded alignment operations.

Used for GFA overlaps and the `cg:Z` tag of PAF/GAF records.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from gfakit.core.errors import InvalidFieldError, ParseFromStringError
from gfakit.core.io import BytesLike, as_bytes

_RUN_RE = re.compile(rb"([0-9]+)([MIDNSHP=X])")

MAX_RUN_LENGTH = 2 ** 32 - 1


class CIGAROp(Enum):
    """CIGAR operations, numbered as in BAM."""
    M = 0
    I = 1
    D = 2
    N = 3
    S = 4
    H = 5
    P = 6
    E = 7
    X = 8

    @property
    def char(self) -> str:
        return _OP_CHARS[self]

    @property
    def code(self) -> int:
        return self.value

    @classmethod
    def from_char(cls, char: BytesLike) -> Optional['CIGAROp']:
        return _CHAR_OPS.get(as_bytes(char)[:1])

    def consumes_query(self) -> bool:
        return self in (CIGAROp.M, CIGAROp.I, CIGAROp.S, CIGAROp.E, CIGAROp.X)

    def consumes_reference(self) -> bool:
        return self in (CIGAROp.M, CIGAROp.D, CIGAROp.N, CIGAROp.E, CIGAROp.X)

    def __str__(self) -> str:
        return self.char


_OP_CHARS = {op: ("=" if op is CIGAROp.E else op.name) for op in CIGAROp}
_CHAR_OPS = {char.encode("ascii"): op for op, char in _OP_CHARS.items()}


@dataclass
class CIGAR:
    """An ordered list of (length, operation) runs."""
    ops: List[Tuple[int, CIGAROp]] = field(default_factory=list)

    @classmethod
    def parse_prefix(cls, data: BytesLike) -> Tuple['CIGAR', bytes]:
        """
        Parse the longest valid CIGAR at the start of `data`.

        Args:
            data: Bytes beginning with a CIGAR string

        Returns:
            The parsed CIGAR and the unconsumed remainder

        Raises:
            InvalidFieldError: If not even one run could be parsed
            ParseFromStringError: If a run length does not fit in 32 bits
        """
        data = as_bytes(data)
        ops = []
        pos = 0
        while True:
            match = _RUN_RE.match(data, pos)
            if match is None:
                break
            length = int(match.group(1))
            if length > MAX_RUN_LENGTH:
                raise ParseFromStringError(f"CIGAR run length too large: {match.group(1)!r}")
            ops.append((length, _CHAR_OPS[match.group(2)]))
            pos = match.end()

        if not ops:
            raise InvalidFieldError("cigar", f"no CIGAR operations in {data!r}")
        return cls(ops), data[pos:]

    @classmethod
    def parse(cls, data: BytesLike) -> 'CIGAR':
        """Parse a complete CIGAR string; trailing bytes are an error."""
        cigar, rest = cls.parse_prefix(data)
        if rest:
            raise InvalidFieldError("cigar", f"unexpected trailing input {rest!r}")
        return cigar

    def query_length(self) -> int:
        return sum(length for length, op in self.ops if op.consumes_query())

    def reference_length(self) -> int:
        return sum(length for length, op in self.ops if op.consumes_reference())

    def to_cigartuples(self) -> List[Tuple[int, int]]:
        """(operation code, length) pairs in the order pysam uses."""
        return [(op.code, length) for length, op in self.ops]

    def __iter__(self) -> Iterator[Tuple[int, CIGAROp]]:
        return iter(self.ops)

    def __len__(self) -> int:
        return len(self.ops)

    def __str__(self) -> str:
        return "".join(f"{length}{op}" for length, op in self.ops)

    def __bytes__(self) -> bytes:
        return str(self).encode("ascii")
