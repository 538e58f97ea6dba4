import pytest

from gfakit.core.errors import InvalidFieldError, InvalidTagTypeError, ParseFromStringError
from gfakit.optfields import (
    NoTags,
    OptField,
    OptFieldKind,
    OptFieldVal,
    OptionalFields,
)


def test_parse_int_tag():
    field = OptField.parse(b"RC:i:123")
    assert field.tag == b"RC"
    assert field.value == OptFieldVal.integer(123)
    assert field.value.kind is OptFieldKind.INT


def test_parse_each_type():
    assert OptField.parse(b"XA:A:*").value == OptFieldVal.char(b"*")
    assert OptField.parse(b"XI:i:-42").value == OptFieldVal.integer(-42)
    assert OptField.parse(b"XI:i:+42").value == OptFieldVal.integer(42)
    assert OptField.parse(b"XF:f:1.5e3").value == OptFieldVal.floating(1500.0)
    assert OptField.parse(b"XZ:Z:some text: with colons").value == OptFieldVal.string(b"some text: with colons")
    assert OptField.parse(b'XJ:J:{"a":[1,2]}').value == OptFieldVal.json(b'{"a":[1,2]}')
    assert OptField.parse(b"XH:H:1AFF").value == OptFieldVal.hex_bytes(b"\x1a\xff")
    assert OptField.parse(b"XB:B:c,-1,2,3").value == OptFieldVal.int_array([-1, 2, 3], "c")
    assert OptField.parse(b"XB:B:f,0.5,-2").value == OptFieldVal.float_array([0.5, -2.0])


def test_hex_decodes_digit_pairs():
    value = OptFieldVal.parse("H", "0aFF10").value
    assert value == b"\x0a\xff\x10"
    # Re-encoded with uppercase digits
    assert OptField.parse(b"XH:H:0aFF10").to_bytes() == b"XH:H:0AFF10"


@pytest.mark.parametrize("value", [
    OptFieldVal.char(b"a"),
    OptFieldVal.integer(-9223372036854775808),
    OptFieldVal.floating(0.1),
    OptFieldVal.string(b"hello world"),
    OptFieldVal.json(b'{"key": "value"}'),
    OptFieldVal.hex_bytes(b"\x00\x7f\xff"),
    OptFieldVal.int_array([0, 65535], "S"),
    OptFieldVal.float_array([1.25, -3.0, 1e-07]),
])
def test_value_round_trip(value):
    field = OptField.new(b"XX", value)
    assert OptField.parse(field.to_bytes()) == field


@pytest.mark.parametrize("raw, error", [
    (b"XI:i:abc", ParseFromStringError),
    (b"XI:i:", ParseFromStringError),
    (b"XI:i:9223372036854775808", ParseFromStringError),
    (b"XF:f:1.2.3", ParseFromStringError),
    (b"XA:A:ab", InvalidFieldError),
    (b"XZ:Z:", InvalidFieldError),
    (b"XZ:Z:tab\there", InvalidFieldError),
    (b"XH:H:ABC", InvalidFieldError),
    (b"XH:H:XY", InvalidFieldError),
    (b"XB:B:i,1,x,3", ParseFromStringError),
    (b"XB:B:c,128", ParseFromStringError),
    (b"XB:B:C,-1", ParseFromStringError),
    (b"XB:B:q,1", InvalidFieldError),
    (b"XB:B:i1", InvalidFieldError),
    (b"XB:B:", InvalidFieldError),
])
def test_malformed_values(raw, error):
    with pytest.raises(error):
        OptField.parse(raw)


def test_unknown_type_is_fatal():
    with pytest.raises(InvalidTagTypeError) as excinfo:
        OptField.parse(b"XX:Q:1")
    assert excinfo.value.type_char == "Q"

    with pytest.raises(InvalidTagTypeError):
        OptField.parse(b"XX:ii:1")


def test_malformed_triplets():
    with pytest.raises(InvalidFieldError):
        OptField.parse(b"RC:i")
    with pytest.raises(InvalidFieldError):
        OptField.parse(b"1C:i:5")
    with pytest.raises(InvalidFieldError):
        OptField.parse(b"RCX:i:5")


def test_empty_integer_array():
    value = OptFieldVal.parse(b"B", b"i")
    assert value == OptFieldVal.int_array([], "i")
    assert value.to_bytes() == b"i"


def test_no_tags_validates_but_keeps_nothing():
    tags = NoTags.parse([b"RC:i:123", b"LN:i:5"])
    assert tags == NoTags()
    assert tags.fields() == []
    assert tags.get_field(b"RC") is None
    assert tags.to_bytes() == b""

    with pytest.raises(ParseFromStringError):
        NoTags.parse([b"RC:i:123", b"LN:i:five"])


def test_optional_fields_keeps_order():
    tags = OptionalFields.parse([b"RC:i:123", b"LN:i:5", b"ZZ:Z:x"])
    assert [f.tag for f in tags] == [b"RC", b"LN", b"ZZ"]
    assert len(tags) == 3
    assert tags.get_field("LN").value == OptFieldVal.integer(5)
    assert tags.get_field(b"XX") is None
    assert tags.to_bytes() == b"RC:i:123\tLN:i:5\tZZ:Z:x"


def test_remove_field_peels_first_match():
    tags = OptionalFields.parse([b"RC:i:1", b"KC:i:2", b"RC:i:3"])

    assert tags.remove_field(b"RC") == OptFieldVal.integer(1)
    assert [f.to_bytes() for f in tags] == [b"KC:i:2", b"RC:i:3"]

    assert tags.remove_field(b"MQ") is None
    assert tags.remove_field(b"KC") == OptFieldVal.integer(2)
    assert tags.to_bytes() == b"RC:i:3"


def test_optional_fields_equality():
    assert OptionalFields.parse([b"RC:i:1"]) == OptionalFields([OptField(b"RC", OptFieldVal.integer(1))])
    assert OptionalFields.parse([b"RC:i:1"]) != OptionalFields.parse([b"RC:i:2"])
    assert OptionalFields() == OptionalFields.parse([])


def test_floats_must_be_finite():
    with pytest.raises(ValueError):
        OptFieldVal.floating(float("inf"))
    with pytest.raises(ValueError):
        OptFieldVal.float_array([1.0, float("nan")])
    with pytest.raises(ParseFromStringError):
        OptField.parse(b"XF:f:1e999")
    with pytest.raises(ParseFromStringError):
        OptField.parse(b"XB:B:f,1.5,-1e400")


def test_copy_is_independent():
    tags = OptionalFields.parse([b"RC:i:1", b"KC:i:2"])
    copied = tags.copy()
    assert copied == tags
    copied.remove_field(b"RC")
    assert len(tags) == 2
    assert NoTags().copy() == NoTags()
