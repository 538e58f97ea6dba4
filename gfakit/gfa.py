"""
GFA1 record types and the GFA container.

Segment, Link and Containment are generic over how segment identities are
represented: `bytes` as read from the file, or `int` after projecting the
whole graph with `GFA.usize_names()`. Every record is also generic over
the optional field capture policy (see gfakit.optfields).
"""
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path as FilePath
from typing import Generic, Iterator, List, Optional, Tuple, TypeVar, Union

from gfakit.cigar import CIGAR
from gfakit.core.errors import MissingFieldsError, OrientationError, ParseFieldError, UintIdError
from gfakit.core.models import Orientation
from gfakit.optfields import NO_TAGS, OptFields

logger = logging.getLogger(__name__)

SegmentId = Union[bytes, int]
N = TypeVar("N", bytes, int)
T = TypeVar("T", bound=OptFields)

MAX_USIZE = 2 ** 64 - 1


def _name_bytes(name: SegmentId) -> bytes:
    if isinstance(name, int):
        return str(name).encode("ascii")
    return name


def _join(columns: List[bytes], optional: OptFields) -> bytes:
    tags = optional.to_bytes()
    if tags:
        columns.append(tags)
    return b"\t".join(columns)


def _overlap_cigar(overlap: bytes) -> Optional[CIGAR]:
    if overlap == b"*":
        return None
    return CIGAR.parse(overlap)


def parse_usize(name: SegmentId) -> int:
    """
    Interpret a segment identity as an unsigned 64-bit integer.

    Raises:
        UintIdError: If the identity is not a plain run of ASCII digits
    """
    if isinstance(name, int):
        if 0 <= name <= MAX_USIZE:
            return name
        raise UintIdError(f"Segment ID out of range: {name}")
    if not name.isdigit():
        raise UintIdError(f"Segment ID is not an unsigned integer: {name!r}")
    value = int(name)
    if value > MAX_USIZE:
        raise UintIdError(f"Segment ID out of range: {name!r}")
    return value


@dataclass
class Header(Generic[T]):
    """The header line of a GFA graph."""
    version: Optional[bytes] = None
    optional: T = field(default_factory=lambda: NO_TAGS)

    def to_bytes(self) -> bytes:
        columns = [b"H"]
        if self.version is not None:
            columns.append(b"VN:Z:" + self.version)
        return _join(columns, self.optional)

    def __bytes__(self) -> bytes:
        return self.to_bytes()


@dataclass
class Segment(Generic[N, T]):
    """A segment (node) of the graph. `*` as sequence means it is absent."""
    name: N
    sequence: bytes
    optional: T = field(default_factory=lambda: NO_TAGS)

    def has_sequence(self) -> bool:
        return self.sequence != b"*"

    def usize_name(self) -> 'Segment[int, T]':
        return replace(self, name=parse_usize(self.name), optional=self.optional.copy())

    def to_bytes(self) -> bytes:
        return _join([b"S", _name_bytes(self.name), self.sequence], self.optional)

    def __bytes__(self) -> bytes:
        return self.to_bytes()


@dataclass
class Link(Generic[N, T]):
    """An oriented edge from one segment end to another."""
    from_segment: N
    from_orient: Orientation
    to_segment: N
    to_orient: Orientation
    overlap: bytes
    optional: T = field(default_factory=lambda: NO_TAGS)

    def cigar(self) -> Optional[CIGAR]:
        """The overlap as a CIGAR, or None when it is `*`."""
        return _overlap_cigar(self.overlap)

    def usize_name(self) -> 'Link[int, T]':
        return replace(
            self,
            from_segment=parse_usize(self.from_segment),
            to_segment=parse_usize(self.to_segment),
            optional=self.optional.copy(),
        )

    def to_bytes(self) -> bytes:
        return _join([
            b"L",
            _name_bytes(self.from_segment),
            bytes(self.from_orient),
            _name_bytes(self.to_segment),
            bytes(self.to_orient),
            self.overlap,
        ], self.optional)

    def __bytes__(self) -> bytes:
        return self.to_bytes()


@dataclass
class Containment(Generic[N, T]):
    """A segment contained in another one, starting at `pos`."""
    container_name: N
    container_orient: Orientation
    contained_name: N
    contained_orient: Orientation
    pos: int
    overlap: bytes
    optional: T = field(default_factory=lambda: NO_TAGS)

    def cigar(self) -> Optional[CIGAR]:
        return _overlap_cigar(self.overlap)

    def usize_name(self) -> 'Containment[int, T]':
        return replace(
            self,
            container_name=parse_usize(self.container_name),
            contained_name=parse_usize(self.contained_name),
            optional=self.optional.copy(),
        )

    def to_bytes(self) -> bytes:
        return _join([
            b"C",
            _name_bytes(self.container_name),
            bytes(self.container_orient),
            _name_bytes(self.contained_name),
            bytes(self.contained_orient),
            str(self.pos).encode("ascii"),
            self.overlap,
        ], self.optional)

    def __bytes__(self) -> bytes:
        return self.to_bytes()


def parse_path_step(step: bytes) -> Tuple[bytes, Orientation]:
    """Split one `name+` / `name-` path step into identity and orientation."""
    if not step:
        raise MissingFieldsError("Empty step in path")
    orient = Orientation.from_bytes(step[-1:])
    if orient is None:
        raise OrientationError(f"Path step did not include orientation: {step!r}")
    return step[:-1], orient


@dataclass
class Path(Generic[T]):
    """
    A named walk through the graph.

    The step list is kept as the unparsed comma-joined column to keep memory
    proportional to the input; `iter()` decodes it on demand.
    """
    path_name: bytes
    segment_names: bytes
    overlaps: List[bytes] = field(default_factory=list)
    optional: T = field(default_factory=lambda: NO_TAGS)

    def iter(self) -> Iterator[Tuple[bytes, Orientation]]:
        """
        Lazily yield `(segment name, orientation)` for each step.

        Every call starts a fresh pass over the stored step string.

        Raises:
            OrientationError: If a step does not end in `+` or `-`
        """
        for step in self.segment_names.split(b","):
            yield parse_path_step(step)

    def steps(self) -> Iterator[Tuple[bytes, Orientation]]:
        return self.iter()

    def __iter__(self) -> Iterator[Tuple[bytes, Orientation]]:
        return self.iter()

    def usize_segments(self) -> bool:
        """True if every step's segment name is an unsigned 64-bit integer."""
        try:
            for name, _ in self.iter():
                parse_usize(name)
        except UintIdError:
            return False
        return True

    def overlap_cigars(self) -> List[Optional[CIGAR]]:
        return [_overlap_cigar(overlap) for overlap in self.overlaps]

    def to_bytes(self) -> bytes:
        overlaps = b",".join(self.overlaps) if self.overlaps else b"*"
        return _join([b"P", self.path_name, self.segment_names, overlaps], self.optional)

    def __bytes__(self) -> bytes:
        return self.to_bytes()


Line = Union[Header, Segment, Link, Containment, Path]


@dataclass
class GFA(Generic[N, T]):
    """
    All the records of a GFA graph, one list per record kind.

    Lines are kept in insertion order; there is no deduplication and no
    cross-referencing between records.
    """
    header: Header = field(default_factory=Header)
    segments: List[Segment] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    containments: List[Containment] = field(default_factory=list)
    paths: List[Path] = field(default_factory=list)

    def insert_line(self, line: Line) -> None:
        """Append a parsed line to its list; a header replaces the current one."""
        if isinstance(line, Header):
            self.header = line
        elif isinstance(line, Segment):
            self.segments.append(line)
        elif isinstance(line, Link):
            self.links.append(line)
        elif isinstance(line, Containment):
            self.containments.append(line)
        elif isinstance(line, Path):
            self.paths.append(line)
        else:
            raise TypeError(f"Not a GFA line: {line!r}")

    def usize_names(self) -> Optional['GFA[int, T]']:
        """
        Create a copy of the graph whose segment identities are integers.

        Returns:
            The projected graph, or None as soon as any segment, link,
            containment or path step uses an identity that is not an
            unsigned integer
        """
        gfa = GFA(header=replace(self.header, optional=self.header.optional.copy()))
        try:
            gfa.segments = [seg.usize_name() for seg in self.segments]
            gfa.links = [link.usize_name() for link in self.links]
            gfa.containments = [cont.usize_name() for cont in self.containments]
        except UintIdError as e:
            logger.debug(f"Integer ID projection failed: {e}")
            return None

        for path in self.paths:
            try:
                numeric = path.usize_segments()
            except ParseFieldError as e:
                logger.debug(f"Integer ID projection failed on path {path.path_name!r}: {e}")
                return None
            if not numeric:
                logger.debug(f"Integer ID projection failed on path {path.path_name!r}")
                return None
            gfa.paths.append(replace(path, overlaps=list(path.overlaps), optional=path.optional.copy()))
        return gfa

    def lines(self) -> Iterator[Line]:
        """Yield the header (if it carries anything), then segments, links, containments and paths."""
        if self.header.version is not None or self.header.optional.fields():
            yield self.header
        yield from self.segments
        yield from self.links
        yield from self.containments
        yield from self.paths

    def to_bytes(self) -> bytes:
        return b"".join(line.to_bytes() + b"\n" for line in self.lines())

    def write(self, filepath: Union[str, FilePath]) -> None:
        logger.info(f"Writing GFA with {len(self.segments)} segments to {filepath}")
        with open(filepath, 'wb') as f:
            for line in self.lines():
                f.write(line.to_bytes())
                f.write(b"\n")

    def __len__(self) -> int:
        return len(self.segments) + len(self.links) + len(self.containments) + len(self.paths)

