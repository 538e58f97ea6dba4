import pytest

GFA_LINES = [
    b"H\tVN:Z:1.0",
    b"S\t11\tACCTT\tRC:i:123",
    b"S\t12\tTCAAGG",
    b"S\t13\tCTTGATT\tLN:i:7",
    b"L\t11\t+\t12\t-\t4M",
    b"L\t12\t-\t13\t+\t5M",
    b"C\t11\t+\t13\t+\t2\t3M",
    b"P\t14\t11+,12-,13+\t4M,5M",
]

PAF_LINES = [
    b"read1\t6\t0\t6\t+\tchr1\t12\t2\t8\t6\t6\t60\tcg:Z:6M",
    b"read2\t7\t0\t7\t-\tchr2\t11\t1\t8\t7\t7\t255\tNM:i:0",
]

GAF_LINES = [
    b"read1\t6\t0\t6\t+\t>s2>s3>s4\t12\t2\t8\t6\t6\t60\tcg:Z:6M",
    b"read1\t6\t0\t6\t+\tchr1\t12\t2\t8\t6\t6\t60\tcg:Z:6M",
    b"read2\t7\t0\t7\t-\t>chr1:5-8>foo:8-16\t11\t1\t8\t7\t7\t60\tcg:Z:7M",
]


@pytest.fixture
def gfa_file(tmp_path):
    """A small GFA1 graph, in the order GFA.lines() writes records."""
    p = tmp_path / "graph.gfa"
    p.write_bytes(b"".join(line + b"\n" for line in GFA_LINES))
    return p


@pytest.fixture
def messy_gfa_file(tmp_path):
    """The same graph with comments, blank lines and an unsupported record type."""
    p = tmp_path / "messy.gfa"
    lines = [b"# assembled by hand"] + GFA_LINES[:3] + [b"", b"W\tsample\t1\tchr1\t0\t10\t>11>12"] + GFA_LINES[3:]
    p.write_bytes(b"".join(line + b"\n" for line in lines))
    return p


@pytest.fixture
def broken_gfa_file(tmp_path):
    """A graph whose fourth line has an invalid orientation."""
    p = tmp_path / "broken.gfa"
    lines = GFA_LINES[:3] + [b"L\t11\t?\t12\t-\t4M"] + GFA_LINES[3:]
    p.write_bytes(b"".join(line + b"\n" for line in lines))
    return p


@pytest.fixture
def paf_file(tmp_path):
    p = tmp_path / "alignments.paf"
    p.write_bytes(b"\n".join(PAF_LINES) + b"\n\n")
    return p


@pytest.fixture
def gaf_file(tmp_path):
    p = tmp_path / "alignments.gaf"
    p.write_bytes(b"".join(line + b"\n" for line in GAF_LINES))
    return p
