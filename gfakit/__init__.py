"""
gfakit: parsers for GFA assembly graphs and PAF/GAF alignments.
"""

__version__ = "0.2.0"

from .core.models import Orientation
from .cigar import CIGAR, CIGAROp
from .optfields import NoTags, OptField, OptFieldKind, OptFieldVal, OptionalFields
from .gfa import GFA, Containment, Header, Link, Path, Segment
from .parser import GFAParser, parse_gfa
from .gafpaf import GAF, PAF, GAFPath, GAFStep, RecordReader, parse_gaf, parse_paf

__all__ = [
    "Orientation",
    "CIGAR",
    "CIGAROp",
    "NoTags",
    "OptField",
    "OptFieldKind",
    "OptFieldVal",
    "OptionalFields",
    "GFA",
    "Header",
    "Segment",
    "Link",
    "Containment",
    "Path",
    "GFAParser",
    "parse_gfa",
    "GAF",
    "PAF",
    "GAFPath",
    "GAFStep",
    "RecordReader",
    "parse_gaf",
    "parse_paf",
]
