"""
Parser for Graphical Fragment Assembly (GFA1) files.

Each record kind has its own parser working on the already tab-split
columns that follow the record letter. GFAParser dispatches lines to
them and drives a whole stream of lines into a GFA object.
"""
import logging
import re
from pathlib import Path as FilePath
from typing import Callable, Iterable, Iterator, Type, Union

from gfakit.cigar import CIGAR
from gfakit.core.errors import (
    EmptyLineError,
    GFAKitError,
    InvalidFieldError,
    InvalidLineError,
    ParseError,
    ParseFieldError,
    UnknownLineTypeError,
)
from gfakit.core.io import BytesLike, next_field, read_lines, strip_line
from gfakit.core.models import Orientation
from gfakit.gfa import (
    GFA,
    Containment,
    Header,
    Line,
    Link,
    Path,
    Segment,
    SegmentId,
    parse_usize,
)
from gfakit.optfields import OptField, OptFields, OptionalFields

_NAME_RE = re.compile(rb"[!-)+-<>-~][!-~]*")
_SEQUENCE_RE = re.compile(rb"\*|[A-Za-z=.]+")
_STEPS_RE = re.compile(rb"[!-~]+")
_POS_RE = re.compile(rb"[0-9]+")

NameParser = Callable[[bytes], SegmentId]


def parse_bytes_name(token: bytes) -> bytes:
    """Keep a segment name as bytes after checking it against the GFA1 name grammar."""
    if not _NAME_RE.fullmatch(token):
        raise InvalidFieldError("name", f"invalid segment name {token!r}")
    return token


def parse_usize_name(token: bytes) -> int:
    """Parse a segment name directly into an unsigned integer."""
    return parse_usize(token)


def parse_overlap(token: bytes) -> bytes:
    """Check an overlap column, `*` or a CIGAR string, and return it unchanged."""
    if token == b"*":
        return token
    try:
        CIGAR.parse(token)
    except ParseFieldError as e:
        raise InvalidFieldError("overlap", str(e)) from e
    return token


def parse_header(fields: Iterator[bytes], optional: Type[OptFields] = OptionalFields) -> Header:
    """The first `VN:Z` tag becomes the version; other tags go to the capture policy."""
    version = None
    rest = []
    for column in fields:
        if version is None and column.startswith(b"VN:Z:"):
            version = OptField.parse(column).value.value
        else:
            rest.append(column)
    return Header(version=version, optional=optional.parse(rest))


def parse_segment(fields: Iterator[bytes], optional: Type[OptFields] = OptionalFields,
                  name_parser: NameParser = parse_bytes_name) -> Segment:
    name = name_parser(next_field(fields))
    sequence = next_field(fields)
    if not _SEQUENCE_RE.fullmatch(sequence):
        raise InvalidFieldError("sequence", f"invalid sequence {sequence[:32]!r}")
    return Segment(name=name, sequence=sequence, optional=optional.parse(fields))


def parse_link(fields: Iterator[bytes], optional: Type[OptFields] = OptionalFields,
               name_parser: NameParser = parse_bytes_name) -> Link:
    from_segment = name_parser(next_field(fields))
    from_orient = Orientation.parse(next_field(fields))
    to_segment = name_parser(next_field(fields))
    to_orient = Orientation.parse(next_field(fields))
    overlap = parse_overlap(next_field(fields))
    return Link(
        from_segment=from_segment,
        from_orient=from_orient,
        to_segment=to_segment,
        to_orient=to_orient,
        overlap=overlap,
        optional=optional.parse(fields),
    )


def parse_containment(fields: Iterator[bytes], optional: Type[OptFields] = OptionalFields,
                      name_parser: NameParser = parse_bytes_name) -> Containment:
    container_name = name_parser(next_field(fields))
    container_orient = Orientation.parse(next_field(fields))
    contained_name = name_parser(next_field(fields))
    contained_orient = Orientation.parse(next_field(fields))
    pos = next_field(fields)
    if not _POS_RE.fullmatch(pos):
        raise InvalidFieldError("pos", f"not a position: {pos!r}")
    overlap = parse_overlap(next_field(fields))
    return Containment(
        container_name=container_name,
        container_orient=container_orient,
        contained_name=contained_name,
        contained_orient=contained_orient,
        pos=int(pos),
        overlap=overlap,
        optional=optional.parse(fields),
    )


def parse_path(fields: Iterator[bytes], optional: Type[OptFields] = OptionalFields) -> Path:
    """
    Parse the columns of a `P` line.

    The step column is only checked to be printable; it is stored as-is and
    decoded lazily by Path.iter().
    """
    path_name = next_field(fields)
    if not _NAME_RE.fullmatch(path_name):
        raise InvalidFieldError("path_name", f"invalid path name {path_name!r}")
    segment_names = next_field(fields)
    if not _STEPS_RE.fullmatch(segment_names):
        raise InvalidFieldError("segment_names", f"invalid step list {segment_names[:32]!r}")
    overlaps = [parse_overlap(overlap) for overlap in next_field(fields).split(b",")]
    return Path(
        path_name=path_name,
        segment_names=segment_names,
        overlaps=overlaps,
        optional=optional.parse(fields),
    )


class GFAParser:
    """
    Parser for GFA1 lines and files.

    The capture policy for optional fields and the representation of
    segment identities are fixed when the parser is built. Record kinds can
    be switched off; lines of a disabled kind are treated like unknown
    line types and skipped.
    """

    SEGMENT_ID_TYPES = ("bytes", "usize")

    def __init__(self, optional: Type[OptFields] = OptionalFields, segment_ids: str = "bytes",
                 segments: bool = True, links: bool = True,
                 containments: bool = True, paths: bool = True):
        if segment_ids not in self.SEGMENT_ID_TYPES:
            raise ValueError(f"segment_ids must be one of {self.SEGMENT_ID_TYPES}, got {segment_ids!r}")
        self.logger = logging.getLogger(__name__)
        self.optional = optional
        self.segment_ids = segment_ids
        self.name_parser: NameParser = parse_usize_name if segment_ids == "usize" else parse_bytes_name
        self.enabled = {
            b"H": True,
            b"S": segments,
            b"L": links,
            b"C": containments,
            b"P": paths,
        }
        self.skipped_lines = 0

    @classmethod
    def from_config(cls, config) -> 'GFAParser':
        """Build a parser from a gfakit.config.Config."""
        return cls(
            optional=config.optional_fields_class(),
            segment_ids=config.get("segment_ids"),
            segments=config.get("segments"),
            links=config.get("links"),
            containments=config.get("containments"),
            paths=config.get("paths"),
        )

    def parse_line(self, line: BytesLike) -> Line:
        """
        Parse a single GFA line.

        Raises:
            EmptyLineError: If the line is empty (recoverable)
            UnknownLineTypeError: If the record letter is unknown or disabled (recoverable)
            InvalidLineError: If any column fails to parse
        """
        line = strip_line(line)
        if not line:
            raise EmptyLineError()

        fields = iter(line.split(b"\t"))
        line_type = next(fields)
        if not self.enabled.get(line_type, False):
            raise UnknownLineTypeError(line_type)

        try:
            if line_type == b"H":
                return parse_header(fields, self.optional)
            elif line_type == b"S":
                return parse_segment(fields, self.optional, self.name_parser)
            elif line_type == b"L":
                return parse_link(fields, self.optional, self.name_parser)
            elif line_type == b"C":
                return parse_containment(fields, self.optional, self.name_parser)
            else:
                return parse_path(fields, self.optional)
        except ParseFieldError as e:
            raise InvalidLineError.from_field_error(e, line) from e

    def iter_lines(self, lines: Iterable[BytesLike]) -> Iterator[Line]:
        """
        Parse a stream of lines, skipping empty and unknown lines.

        Any other error stops the stream and is raised with its line number.
        """
        self.skipped_lines = 0
        for line_num, line in enumerate(lines, 1):
            try:
                record = self.parse_line(line)
            except InvalidLineError as e:
                raise InvalidLineError(e.field_error, e.line, line_num) from e.field_error
            except ParseError as e:
                e.break_if_necessary()
                self.skipped_lines += 1
                self.logger.debug(f"Skipping line {line_num}: {e}")
                continue
            yield record

    def parse_lines(self, lines: Iterable[BytesLike]) -> GFA:
        """Build a GFA from an iterable of lines."""
        gfa = GFA(header=Header(optional=self.optional.parse([])))
        for record in self.iter_lines(lines):
            gfa.insert_line(record)
        return gfa

    def parse_file(self, filepath: Union[str, FilePath], progress: bool = False) -> GFA:
        """
        Parse a GFA file.

        Args:
            filepath: Path to the GFA file
            progress: Show a progress bar while reading

        Returns:
            The parsed graph

        Raises:
            GFAIOError: If the file can't be read
            InvalidLineError: On the first line that fails to parse
        """
        self.logger.info(f"Parsing GFA file: {filepath}")
        try:
            gfa = self.parse_lines(read_lines(filepath, progress=progress, desc="Parsing GFA file"))
        except GFAKitError as e:
            self.logger.error(f"Failed to parse GFA file: {e}")
            raise

        self.logger.info(
            f"Successfully parsed GFA with {len(gfa.segments)} segments, {len(gfa.links)} links, "
            f"{len(gfa.containments)} containments and {len(gfa.paths)} paths "
            f"({self.skipped_lines} lines skipped)"
        )
        return gfa


def parse_gfa(lines: Iterable[BytesLike], optional: Type[OptFields] = OptionalFields,
              segment_ids: str = "bytes") -> GFA:
    """Shorthand for GFAParser(...).parse_lines(lines)."""
    return GFAParser(optional=optional, segment_ids=segment_ids).parse_lines(lines)
