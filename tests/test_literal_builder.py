"""Tests for the byte-level literal builder."""

import pytest

from bindgen_descriptor.backend.descriptors import Descriptor
from bindgen_descriptor.backend.literal import LiteralBuilder
from bindgen_descriptor.internals.errors import InternalError


def build(cb):
    dst = bytearray()
    a = LiteralBuilder(dst)
    cb(a)
    return bytes(dst), a.finish()


def test_byte_counts_each_value():
    data, count = build(lambda a: (a.byte(0), a.byte(255)))
    assert data == b"\x00\xff"
    assert count == 2


def test_byte_out_of_range():
    with pytest.raises(InternalError) as exc:
        build(lambda a: a.byte(256))
    assert exc.value.code == "CE0007"


def test_string_is_quoted_without_escaping():
    data, count = build(lambda a: a.str("add_one"))
    assert data == b'"add_one"'
    assert count == 9


def test_utf8_string_counts_bytes_not_characters():
    data, count = build(lambda a: a.str("café"))
    assert data == '"café"'.encode("utf-8")
    assert count == 7


@pytest.mark.parametrize("text", ['say "hi"', "back\\slash", "line\nbreak", "tab\there"])
def test_string_needing_escape_is_rejected(text):
    with pytest.raises(InternalError) as exc:
        build(lambda a: a.str(text))
    assert exc.value.code == "CE0003"


def test_bool():
    assert build(lambda a: a.bool(True)) == (b"true", 4)
    assert build(lambda a: a.bool(False)) == (b"false", 5)


@pytest.mark.parametrize("value,expected", [
    (0, b"0"),
    (7, b"7"),
    (1000, b"1000"),
    (4294967295, b"4294967295"),
])
def test_u32_is_plain_decimal(value, expected):
    assert build(lambda a: a.u32(value)) == (expected, len(expected))


@pytest.mark.parametrize("value", [-1, 2 ** 32])
def test_u32_out_of_range(value):
    with pytest.raises(InternalError) as exc:
        build(lambda a: a.u32(value))
    assert exc.value.code == "CE0004"


def test_null():
    assert build(lambda a: a.null()) == (b"null", 4)


@pytest.mark.parametrize("value,expected", [
    (0, b"   0"),
    (7, b"   7"),
    (42, b"  42"),
    (9999, b"9999"),
])
def test_descriptor_is_always_four_values(value, expected):
    data, count = build(lambda a: a.as_char(Descriptor.from_u32(value)))
    assert data == expected
    assert count == 4


def test_descriptor_out_of_range():
    with pytest.raises(InternalError) as exc:
        Descriptor.from_u32(10_000)
    assert exc.value.code == "CE0005"


def test_descriptor_reads_back_as_int():
    assert int(Descriptor.from_u32(123)) == 123


def test_fields_keep_given_order():
    data, _ = build(lambda a: a.fields([
        ("zeta", lambda a: a.u32(1)),
        ("alpha", lambda a: a.bool(False)),
        ("mid", lambda a: a.null()),
    ]))
    assert data == b'{"zeta":1,"alpha":false,"mid":null}'


def test_empty_fields():
    assert build(lambda a: a.fields([])) == (b"{}", 2)


def test_empty_list():
    assert build(lambda a: a.list([], lambda x, a: a.u32(x))) == (b"[]", 2)


def test_list_separates_items():
    data, count = build(lambda a: a.list([1, 22, 333], lambda x, a: a.u32(x)))
    assert data == b"[1,22,333]"
    assert count == len(data)


def test_optional_emits_null_when_absent():
    assert build(lambda a: a.optional_str(None)) == (b"null", 4)
    assert build(lambda a: a.optional_str("x")) == (b'"x"', 3)


def test_finish_matches_values_appended():
    def cb(a):
        a.fields([
            ("name", lambda a: a.str("f")),
            ("ids", lambda a: a.list([Descriptor.from_u32(1), Descriptor.from_u32(250)],
                                     lambda d, a: a.as_char(d))),
            ("ok", lambda a: a.bool(True)),
        ])
    data, count = build(cb)
    assert data == b'{"name":"f","ids":[   1, 250],"ok":true}'
    assert count == len(data)


def test_any_mutable_sequence_is_a_sink():
    dst: list[int] = []
    a = LiteralBuilder(dst)
    a.str("ok")
    assert dst == list(b'"ok"')
    assert a.finish() == 4
