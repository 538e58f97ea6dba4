"""
PAF and GAF alignment records.

Both formats share the same twelve mandatory columns followed by optional
fields. GAF differs only in the sixth column, which holds either a stable
sequence name or an oriented walk through a graph, e.g. `>s1<s2` or
`>chr1:5-8>foo:8-16`. A GAF line is parsed as a PAF line first and that
column is then re-parsed as a GAFPath.
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path as FilePath
from typing import Callable, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Type, Union

from gfakit.cigar import CIGAR
from gfakit.core.errors import (
    EmptyLineError,
    InvalidFieldError,
    InvalidLineError,
    ParseError,
    ParseFieldError,
)
from gfakit.core.io import BytesLike, as_bytes, decode_utf8, next_field, read_lines, strip_line
from gfakit.core.models import Orientation
from gfakit.optfields import NO_TAGS, OptFieldKind, OptFields, OptionalFields

_STEP_RE = re.compile(rb"([<>])([^<>:\s]+)(?::([0-9]+)-([0-9]+))?")
_STABLE_ID_RE = re.compile(rb"[!-~]+")
_UINT_RE = re.compile(rb"[0-9]+")

MAX_QUALITY = 255


class Interval(NamedTuple):
    """Half-open coordinate range [start, end)."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


def _parse_uint(raw: bytes, name: str, maximum: Optional[int] = None) -> int:
    text = decode_utf8(raw)
    if not _UINT_RE.fullmatch(raw):
        raise InvalidFieldError(name, f"expected an unsigned integer, got {text!r}")
    value = int(text)
    if maximum is not None and value > maximum:
        raise InvalidFieldError(name, f"{value} is larger than {maximum}")
    return value


def _parse_seq_fields(fields: Iterator[bytes], prefix: str) -> Tuple[bytes, int, Interval]:
    name = next_field(fields)
    if not name:
        raise InvalidFieldError(f"{prefix}_seq_name", "empty name")
    length = _parse_uint(next_field(fields), f"{prefix}_seq_len")
    start = _parse_uint(next_field(fields), f"{prefix}_seq_start")
    end = _parse_uint(next_field(fields), f"{prefix}_seq_end")
    return name, length, Interval(start, end)


def _orient_char(orient: Orientation) -> bytes:
    return b">" if orient is Orientation.FORWARD else b"<"


def _cg_cigar(optional: OptFields) -> Optional[CIGAR]:
    cg = optional.get_field(b"cg")
    if cg is None or cg.value.kind is not OptFieldKind.STRING:
        return None
    return CIGAR.parse(cg.value.value)


def _join(columns: List[bytes], optional: OptFields) -> bytes:
    tags = optional.to_bytes()
    if tags:
        columns.append(tags)
    return b"\t".join(columns)


@dataclass
class PAF:
    """One line of a Pairwise mApping Format file."""
    query_seq_name: bytes
    query_seq_len: int
    query_seq_range: Interval
    strand: Orientation
    target_seq_name: bytes
    target_seq_len: int
    target_seq_range: Interval
    residue_matches: int
    block_length: int
    quality: int
    optional: OptFields = field(default_factory=lambda: NO_TAGS)

    def cigar(self) -> Optional[CIGAR]:
        """The alignment from the `cg:Z` tag, if the record carries one."""
        return _cg_cigar(self.optional)

    def to_bytes(self) -> bytes:
        return _join([
            self.query_seq_name,
            str(self.query_seq_len).encode("ascii"),
            str(self.query_seq_range.start).encode("ascii"),
            str(self.query_seq_range.end).encode("ascii"),
            bytes(self.strand),
            self.target_seq_name,
            str(self.target_seq_len).encode("ascii"),
            str(self.target_seq_range.start).encode("ascii"),
            str(self.target_seq_range.end).encode("ascii"),
            str(self.residue_matches).encode("ascii"),
            str(self.block_length).encode("ascii"),
            str(self.quality).encode("ascii"),
        ], self.optional)

    def __bytes__(self) -> bytes:
        return self.to_bytes()


def parse_paf(fields: Iterable[BytesLike], optional: Type[OptFields] = OptionalFields) -> PAF:
    """
    Parse the tab-separated columns of a PAF record.

    Args:
        fields: The columns of one record, in order
        optional: Capture policy for the trailing optional fields

    Returns:
        The parsed record

    Raises:
        MissingFieldsError: If fewer than twelve columns are given
        InvalidFieldError: If a numeric column is malformed (names the column)
        OrientationError: If the strand is not `+` or `-`
    """
    fields = (as_bytes(f) for f in fields)
    query_seq_name, query_seq_len, query_seq_range = _parse_seq_fields(fields, "query")
    strand = Orientation.parse(next_field(fields))
    target_seq_name, target_seq_len, target_seq_range = _parse_seq_fields(fields, "target")
    residue_matches = _parse_uint(next_field(fields), "residue_matches")
    block_length = _parse_uint(next_field(fields), "block_length")
    quality = _parse_uint(next_field(fields), "quality", MAX_QUALITY)

    return PAF(
        query_seq_name=query_seq_name,
        query_seq_len=query_seq_len,
        query_seq_range=query_seq_range,
        strand=strand,
        target_seq_name=target_seq_name,
        target_seq_len=target_seq_len,
        target_seq_range=target_seq_range,
        residue_matches=residue_matches,
        block_length=block_length,
        quality=quality,
        optional=optional.parse(fields),
    )


@dataclass(frozen=True)
class GAFStep:
    """One step of an oriented GAF walk."""
    orient: Orientation
    name: bytes

    @staticmethod
    def parse_prefix(data: BytesLike) -> Tuple['GAFStep', bytes]:
        """
        Parse one step from the start of `data`.

        Returns:
            The step and the unconsumed remainder

        Raises:
            InvalidFieldError: If `data` does not start with `>` or `<`
                followed by a name, or if its interval ends before it starts
        """
        data = as_bytes(data)
        match = _STEP_RE.match(data)
        if match is None:
            raise InvalidFieldError("path", f"expected an oriented step at {data[:32]!r}")
        orient = Orientation.FORWARD if match.group(1) == b">" else Orientation.BACKWARD
        name = match.group(2)
        if match.group(3) is not None:
            interval = Interval(int(match.group(3)), int(match.group(4)))
            if interval.start > interval.end:
                raise InvalidFieldError("path", f"interval start is after its end in {match.group(0)!r}")
            step = StableIntervalStep(orient, name, interval)
        else:
            step = SegmentStep(orient, name)
        return step, data[match.end():]

    def to_bytes(self) -> bytes:
        return _orient_char(self.orient) + self.name


@dataclass(frozen=True)
class SegmentStep(GAFStep):
    """A step through a whole segment, e.g. `>s1`."""


@dataclass(frozen=True)
class StableIntervalStep(GAFStep):
    """A step through part of a stable sequence, e.g. `<chr1:5-8`."""
    interval: Interval = Interval(0, 0)

    def to_bytes(self) -> bytes:
        coords = f":{self.interval.start}-{self.interval.end}".encode("ascii")
        return _orient_char(self.orient) + self.name + coords


class GAFPath:
    """The target column of a GAF record: a stable ID or an oriented walk."""

    @staticmethod
    def parse(token: BytesLike) -> 'GAFPath':
        """
        Classify and parse a GAF target column.

        A column starting with `>` or `<` must be entirely made of steps.
        Anything else is a stable ID, which may not contain `>` or `<`.

        Raises:
            InvalidFieldError: If the column is neither
        """
        token = as_bytes(token)
        if token[:1] in (b">", b"<"):
            steps = []
            rest = token
            while rest:
                step, rest = GAFStep.parse_prefix(rest)
                steps.append(step)
            return OrientedWalk(steps)

        if not _STABLE_ID_RE.fullmatch(token):
            raise InvalidFieldError("path", f"invalid stable ID {token!r}")
        if b">" in token or b"<" in token:
            raise InvalidFieldError("path", f"stable ID may not contain '>' or '<': {token!r}")
        return StableId(token)

    def to_bytes(self) -> bytes:
        raise NotImplementedError


@dataclass
class StableId(GAFPath):
    name: bytes

    def to_bytes(self) -> bytes:
        return self.name


@dataclass
class OrientedWalk(GAFPath):
    steps: List[GAFStep] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        return b"".join(step.to_bytes() for step in self.steps)

    def __iter__(self) -> Iterator[GAFStep]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)


@dataclass
class GAF:
    """
    One line of a Graph Alignment Format file.

    `path_len` and `path_range` describe positions along the whole path,
    not along any single step.
    """
    seq_name: bytes
    seq_len: int
    seq_range: Interval
    strand: Orientation
    path: GAFPath
    path_len: int
    path_range: Interval
    residue_matches: int
    block_length: int
    quality: int
    optional: OptFields = field(default_factory=lambda: NO_TAGS)

    def cigar(self) -> Optional[CIGAR]:
        return _cg_cigar(self.optional)

    def to_bytes(self) -> bytes:
        return _join([
            self.seq_name,
            str(self.seq_len).encode("ascii"),
            str(self.seq_range.start).encode("ascii"),
            str(self.seq_range.end).encode("ascii"),
            bytes(self.strand),
            self.path.to_bytes(),
            str(self.path_len).encode("ascii"),
            str(self.path_range.start).encode("ascii"),
            str(self.path_range.end).encode("ascii"),
            str(self.residue_matches).encode("ascii"),
            str(self.block_length).encode("ascii"),
            str(self.quality).encode("ascii"),
        ], self.optional)

    def __bytes__(self) -> bytes:
        return self.to_bytes()


def parse_gaf(fields: Iterable[BytesLike], optional: Type[OptFields] = OptionalFields) -> GAF:
    """Parse the columns of a GAF record: a PAF parse, then the target column as a GAFPath."""
    paf = parse_paf(fields, optional)
    path = GAFPath.parse(paf.target_seq_name)

    return GAF(
        seq_name=paf.query_seq_name,
        seq_len=paf.query_seq_len,
        seq_range=paf.query_seq_range,
        strand=paf.strand,
        path=path,
        path_len=paf.target_seq_len,
        path_range=paf.target_seq_range,
        residue_matches=paf.residue_matches,
        block_length=paf.block_length,
        quality=paf.quality,
        optional=paf.optional,
    )


def _parse_record_line(parse_fn: Callable, line: BytesLike, optional: Type[OptFields]):
    line = strip_line(line)
    if not line:
        raise EmptyLineError()
    try:
        return parse_fn(line.split(b"\t"), optional)
    except ParseFieldError as e:
        raise InvalidLineError.from_field_error(e, line) from e


def parse_paf_line(line: BytesLike, optional: Type[OptFields] = OptionalFields) -> PAF:
    return _parse_record_line(parse_paf, line, optional)


def parse_gaf_line(line: BytesLike, optional: Type[OptFields] = OptionalFields) -> GAF:
    return _parse_record_line(parse_gaf, line, optional)


class RecordReader:
    """
    Streams PAF or GAF records from lines or a file.

    Empty lines are skipped and counted in `skipped_lines`; any other
    error stops the stream and is raised with its line number.
    """

    FORMATS = {"paf": parse_paf, "gaf": parse_gaf}

    def __init__(self, fmt: str = "paf", optional: Type[OptFields] = OptionalFields):
        if fmt not in self.FORMATS:
            raise ValueError(f"fmt must be one of {tuple(self.FORMATS)}, got {fmt!r}")
        self.logger = logging.getLogger(__name__)
        self.fmt = fmt
        self.parse_fn: Callable = self.FORMATS[fmt]
        self.optional = optional
        self.skipped_lines = 0

    def iter_lines(self, lines: Iterable[BytesLike]) -> Iterator:
        self.skipped_lines = 0
        for line_num, line in enumerate(lines, 1):
            try:
                record = _parse_record_line(self.parse_fn, line, self.optional)
            except InvalidLineError as e:
                raise InvalidLineError(e.field_error, e.line, line_num) from e.field_error
            except ParseError as e:
                e.break_if_necessary()
                self.skipped_lines += 1
                self.logger.debug(f"Skipping line {line_num}: {e}")
                continue
            yield record

    def read_file(self, filepath: Union[str, FilePath], progress: bool = False) -> Iterator:
        label = self.fmt.upper()
        self.logger.info(f"Reading {label} file: {filepath}")
        return self.iter_lines(read_lines(filepath, progress=progress, desc=f"Reading {label} file"))


def iter_paf_lines(lines: Iterable[BytesLike], optional: Type[OptFields] = OptionalFields) -> Iterator[PAF]:
    """Parse PAF lines lazily; empty lines are skipped, any other error stops the stream."""
    return RecordReader("paf", optional).iter_lines(lines)


def iter_gaf_lines(lines: Iterable[BytesLike], optional: Type[OptFields] = OptionalFields) -> Iterator[GAF]:
    return RecordReader("gaf", optional).iter_lines(lines)


def read_paf(filepath: Union[str, FilePath], optional: Type[OptFields] = OptionalFields,
             progress: bool = False) -> Iterator[PAF]:
    """Stream the records of a PAF file."""
    return RecordReader("paf", optional).read_file(filepath, progress)


def read_gaf(filepath: Union[str, FilePath], optional: Type[OptFields] = OptionalFields,
             progress: bool = False) -> Iterator[GAF]:
    """Stream the records of a GAF file."""
    return RecordReader("gaf", optional).read_file(filepath, progress)
