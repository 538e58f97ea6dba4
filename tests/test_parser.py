import logging
import os
import tempfile
import unittest

import pytest

from gfakit.core.errors import (
    EmptyLineError,
    GFAIOError,
    InvalidFieldError,
    InvalidLineError,
    MissingFieldsError,
    OrientationError,
    ParseFromStringError,
    UintIdError,
    UnknownLineTypeError,
)
from gfakit.core.models import Orientation
from gfakit.gfa import Containment, Header, Link, Path, Segment
from gfakit.optfields import NoTags, OptField, OptFieldVal, OptionalFields
from gfakit.parser import GFAParser, parse_gfa

F, B = Orientation.FORWARD, Orientation.BACKWARD


def _tags(*fields):
    return OptionalFields.parse(fields)


def test_parse_segment_with_tag():
    line = GFAParser().parse_line(b"S\t11\tACCTT\tRC:i:123")
    expected = Segment(b"11", b"ACCTT", OptionalFields([OptField(b"RC", OptFieldVal.integer(123))]))
    assert line == expected


def test_parse_text_line():
    line = GFAParser().parse_line("S\t11\tACCTT\n")
    assert line == Segment(b"11", b"ACCTT", OptionalFields())


def test_parse_header():
    parser = GFAParser()
    assert parser.parse_line(b"H\tVN:Z:1.0") == Header(b"1.0", OptionalFields())
    assert parser.parse_line(b"H") == Header(None, OptionalFields())

    header = parser.parse_line(b"H\tXX:i:1\tVN:Z:1.0\tVN:Z:2.0")
    assert header.version == b"1.0"
    assert header.optional == _tags(b"XX:i:1", b"VN:Z:2.0")


def test_parse_link():
    line = GFAParser().parse_line(b"L\t11\t+\t12\t-\t4M\tXX:Z:edge")
    assert line == Link(b"11", F, b"12", B, b"4M", _tags(b"XX:Z:edge"))


def test_parse_containment():
    line = GFAParser().parse_line(b"C\t1\t-\t2\t+\t110\t100M")
    assert line == Containment(b"1", B, b"2", F, 110, b"100M", OptionalFields())


def test_parse_path():
    line = GFAParser().parse_line(b"P\t14\t11+,12-,13+\t4M,5M")
    assert line == Path(b"14", b"11+,12-,13+", [b"4M", b"5M"], OptionalFields())
    assert list(line.iter()) == [(b"11", F), (b"12", B), (b"13", F)]


def test_path_steps_checked_lazily():
    line = GFAParser().parse_line(b"P\tp\t11+,12x\t*")
    assert line.segment_names == b"11+,12x"
    with pytest.raises(OrientationError):
        list(line.iter())


def test_no_tags_policy_still_validates():
    parser = GFAParser(optional=NoTags)
    assert parser.parse_line(b"S\t11\tACCTT\tRC:i:123").optional == NoTags()

    with pytest.raises(InvalidLineError) as excinfo:
        parser.parse_line(b"S\t11\tACCTT\tRC:i:abc")
    assert isinstance(excinfo.value.field_error, ParseFromStringError)


@pytest.mark.parametrize("line, field_error", [
    (b"S\t11", MissingFieldsError),
    (b"S\t*11\tACGT", InvalidFieldError),
    (b"S\t11\tAC GT", InvalidFieldError),
    (b"L\t11\tx\t12\t-\t4M", OrientationError),
    (b"L\t11\t+\t12\t-", MissingFieldsError),
    (b"L\t1\t+\t2\t+\t4Q", InvalidFieldError),
    (b"C\t1\t-\t2\t+\tx\t100M", InvalidFieldError),
    (b"P\tp\t\t*", InvalidFieldError),
    (b"P\tp\t1+", MissingFieldsError),
])
def test_malformed_lines(line, field_error):
    with pytest.raises(InvalidLineError) as excinfo:
        GFAParser().parse_line(line)
    assert isinstance(excinfo.value.field_error, field_error)
    assert excinfo.value.line == line.decode()
    assert not excinfo.value.can_safely_continue


def test_invalid_field_names_column():
    with pytest.raises(InvalidLineError) as excinfo:
        GFAParser().parse_line(b"C\t1\t-\t2\t+\tx\t100M")
    assert excinfo.value.field_error.field == "pos"


def test_recoverable_lines():
    parser = GFAParser()
    with pytest.raises(EmptyLineError):
        parser.parse_line(b"")
    with pytest.raises(UnknownLineTypeError) as excinfo:
        parser.parse_line(b"W\tsample\t1")
    assert excinfo.value.line_type == b"W"
    assert excinfo.value.can_safely_continue


def test_unknown_line_is_skipped():
    parser = GFAParser()
    lines = [b"H\tVN:Z:1.0", b"S\t1\tA", b"X\tfoo\tbar", b"", b"S\t2\tC"]
    gfa = parser.parse_lines(lines)
    assert [s.name for s in gfa.segments] == [b"1", b"2"]
    assert parser.skipped_lines == 2


def test_fatal_error_has_line_number():
    lines = [b"S\t1\tA", b"S\t2\tC", b"L\t1\t?\t2\t+\t*", b"S\t3\tG"]
    with pytest.raises(InvalidLineError) as excinfo:
        parse_gfa(lines)
    assert excinfo.value.line_number == 3
    assert isinstance(excinfo.value.field_error, OrientationError)
    assert "line 3" in str(excinfo.value)


def test_usize_segment_ids():
    parser = GFAParser(segment_ids="usize")
    assert parser.parse_line(b"S\t11\tACGT").name == 11
    link = parser.parse_line(b"L\t11\t+\t12\t-\t*")
    assert (link.from_segment, link.to_segment) == (11, 12)

    with pytest.raises(InvalidLineError) as excinfo:
        parser.parse_line(b"S\tabc\tACGT")
    assert isinstance(excinfo.value.field_error, UintIdError)


def test_invalid_segment_id_type():
    with pytest.raises(ValueError):
        GFAParser(segment_ids="str")


def test_disabled_record_kinds():
    parser = GFAParser(links=False, paths=False)
    lines = [b"S\t1\tA", b"L\t1\t+\t1\t+\t*", b"P\tp\t1+\t*", b"S\t2\tC"]
    gfa = parser.parse_lines(lines)
    assert len(gfa.segments) == 2
    assert gfa.links == []
    assert gfa.paths == []
    assert parser.skipped_lines == 2


def test_disabled_kind_is_not_validated():
    parser = GFAParser(links=False)
    gfa = parser.parse_lines([b"L\tbroken"])
    assert len(gfa) == 0


def test_parse_file(gfa_file):
    gfa = GFAParser().parse_file(gfa_file)
    assert gfa.header.version == b"1.0"
    assert len(gfa.segments) == 3
    assert len(gfa.links) == 2
    assert len(gfa.containments) == 1
    assert len(gfa.paths) == 1
    assert gfa.segments[2].optional.get_field(b"LN").value == OptFieldVal.integer(7)


def test_parse_file_skips_comments(messy_gfa_file, gfa_file):
    parser = GFAParser()
    messy = parser.parse_file(messy_gfa_file)
    assert parser.skipped_lines == 3
    assert messy == GFAParser().parse_file(gfa_file)


def test_parse_file_reports_line(broken_gfa_file):
    with pytest.raises(InvalidLineError) as excinfo:
        GFAParser().parse_file(broken_gfa_file)
    assert excinfo.value.line_number == 4


class TestGFAParserFiles(unittest.TestCase):
    """File handling of the GFA parser."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

        self.empty_file = os.path.join(self.temp_dir.name, "empty.gfa")
        with open(self.empty_file, 'w') as f:
            pass

        self.crlf_file = os.path.join(self.temp_dir.name, "crlf.gfa")
        with open(self.crlf_file, 'wb') as f:
            f.write(b"H\tVN:Z:1.0\r\nS\t1\tACGT\r\nS\t2\tTT\r\nL\t1\t+\t2\t+\t0M\r\n")

        logging.getLogger('gfakit.parser').setLevel(logging.CRITICAL)

    def tearDown(self):
        self.temp_dir.cleanup()
        logging.getLogger('gfakit.parser').setLevel(logging.NOTSET)

    def test_nonexistent_file(self):
        with self.assertRaises(GFAIOError) as cm:
            GFAParser().parse_file(os.path.join(self.temp_dir.name, "missing.gfa"))
        self.assertIsInstance(cm.exception.cause, FileNotFoundError)

    def test_empty_file(self):
        gfa = GFAParser().parse_file(self.empty_file)
        self.assertEqual(len(gfa), 0)
        self.assertIsNone(gfa.header.version)

    def test_crlf_line_endings(self):
        gfa = GFAParser().parse_file(self.crlf_file)
        self.assertEqual(len(gfa.segments), 2)
        self.assertEqual(gfa.segments[1].sequence, b"TT")
        self.assertEqual(gfa.links[0].overlap, b"0M")

    def test_progress_bar(self):
        gfa = GFAParser().parse_file(self.crlf_file, progress=True)
        self.assertEqual(len(gfa), 3)
