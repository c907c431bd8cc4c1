import base64
import json
import math

import pytest

from thriftwire.protocol import (
    MessageType,
    ProtocolFormatError,
    ProtocolRangeError,
    SimpleJSONProtocol,
    TType,
)
from thriftwire.protocol.numeric import format_double
from thriftwire.transport import BufferedTransport, MemoryTransport

BOOL_VALUES = [False, True, False, False, True]
BYTE_VALUES = [117, 0, 1, 32, 127, -128, -1]
INT16_VALUES = [459, 0, 1, -1, -128, 127, 32767, -32768]
INT32_VALUES = [459, 0, 1, -1, -128, 127, 32767, 2147483647, -2147483535]
INT64_VALUES = [459, 0, 1, -1, -128, 127, 32767, 2147483647, -2147483535, 34359738481, -(2**63), 2**63 - 1]
DOUBLE_VALUES = [
    459.3, 0.0, -1.0, 1.0, 0.5, 0.3333, 3.14159, 1.537e-38, 1.673e25, 6.02214179e23,
    -6.02214179e23, math.inf, -math.inf, math.nan,
]
STRING_VALUES = [
    "",
    "a",
    "st[uf]f",
    "st,u:ff with spaces",
    "quote \" and back\\slash",
    "control \x00\x01\x1f\n\t\r\b\f",
    "unicode ✓ 日本語",
    "/slash",
]


def written(fn) -> str:
    trans = MemoryTransport()
    prot = SimpleJSONProtocol(trans)
    fn(prot)
    prot.flush()
    return trans.getvalue().decode("utf-8")


def test_write_bool():
    for value in BOOL_VALUES:
        s = written(lambda p: p.write_bool(value))
        assert s == ("true" if value else "false")
        assert json.loads(s) is value


@pytest.mark.parametrize(
    "method,values",
    [
        ("write_byte", BYTE_VALUES),
        ("write_i16", INT16_VALUES),
        ("write_i32", INT32_VALUES),
        ("write_i64", INT64_VALUES),
    ],
)
def test_write_integers(method, values):
    for value in values:
        s = written(lambda p: getattr(p, method)(value))
        assert s == str(value)
        assert json.loads(s) == value


@pytest.mark.parametrize(
    "method,value",
    [
        ("write_byte", 128),
        ("write_byte", -129),
        ("write_i16", 2**15),
        ("write_i32", -(2**31) - 1),
        ("write_i64", 2**63),
    ],
)
def test_write_integer_out_of_range(method, value):
    prot = SimpleJSONProtocol(MemoryTransport())
    with pytest.raises(ProtocolRangeError):
        getattr(prot, method)(value)


def test_write_double():
    for value in DOUBLE_VALUES:
        s = written(lambda p: p.write_double(value))
        if math.isinf(value) and value > 0:
            assert s == '"Infinity"'
        elif math.isinf(value):
            assert s == '"-Infinity"'
        elif math.isnan(value):
            assert s == '"NaN"'
        else:
            assert s == format_double(value)
            assert json.loads(s) == value


def test_write_string():
    for value in STRING_VALUES:
        s = written(lambda p: p.write_string(value))
        assert s[0] == '"' and s[-1] == '"'
        assert json.loads(s) == value


def test_write_string_escapes_only_what_json_requires():
    assert written(lambda p: p.write_string('a"b\\c\n')) == '"a\\"b\\\\c\\n"'
    assert written(lambda p: p.write_string("é/")) == '"é/"'


def test_write_string_rejects_lone_surrogate():
    prot = SimpleJSONProtocol(MemoryTransport())
    with pytest.raises(ProtocolFormatError):
        prot.write_string("\ud800")


def test_write_binary():
    value = bytes((i + ord("a")) % 255 for i in range(4096))
    s = written(lambda p: p.write_binary(value))
    assert s == '"' + base64.b64encode(value).decode("ascii") + '"'
    assert json.loads(s) == base64.b64encode(value).decode("ascii")


def test_write_binary_scenario_and_empty():
    assert written(lambda p: p.write_binary(bytes([0, 1, 2]))) == '"AAEC"'
    assert written(lambda p: p.write_binary(b"")) == '""'


def test_scenario_true_and_nan():
    assert written(lambda p: p.write_bool(True)) == "true"
    assert written(lambda p: p.write_double(math.nan)) == '"NaN"'


@pytest.mark.parametrize("kind", ["list", "set"])
def test_write_list_and_set_of_doubles(kind):
    def write(p):
        getattr(p, f"write_{kind}_begin")(TType.DOUBLE, len(DOUBLE_VALUES))
        for value in DOUBLE_VALUES:
            p.write_double(value)
        getattr(p, f"write_{kind}_end")()

    decoded = json.loads(written(write))
    assert len(decoded) == len(DOUBLE_VALUES)
    for got, value in zip(decoded, DOUBLE_VALUES):
        if math.isinf(value):
            assert got == ("Infinity" if value > 0 else "-Infinity")
        elif math.isnan(value):
            assert got == "NaN"
        else:
            assert got == value


def test_write_map_quotes_integer_keys():
    def write(p):
        p.write_map_begin(TType.I32, TType.DOUBLE, len(DOUBLE_VALUES))
        for k, value in enumerate(DOUBLE_VALUES):
            p.write_i32(k)
            p.write_double(value)
        p.write_map_end()

    s = written(write)
    assert s[0] == "{" and s[-1] == "}"
    pairs = s[1:-1].split(",")
    assert len(pairs) == len(DOUBLE_VALUES)
    for k, (pair, value) in enumerate(zip(pairs, DOUBLE_VALUES)):
        key, text = pair.split(":", 1)
        assert key == f'"{k}"'
        if math.isfinite(value):
            assert text == format_double(value)
        else:
            assert text == '"' + format_double(value) + '"'


def test_integer_key_quoted_only_in_key_position():
    def write(p):
        p.write_map_begin(TType.I32, TType.I32, 1)
        p.write_i32(0)
        p.write_i32(0)
        p.write_map_end()

    assert written(write) == '{"0":0}'


def test_scalar_keys_of_every_type():
    def write(p):
        p.write_map_begin(TType.STRING, TType.BYTE, 6)
        p.write_bool(True)
        p.write_byte(1)
        p.write_double(1.5)
        p.write_byte(2)
        p.write_double(math.nan)
        p.write_byte(3)
        p.write_i64(-7)
        p.write_byte(4)
        p.write_string("s")
        p.write_byte(5)
        p.write_binary(b"\x00")
        p.write_byte(6)
        p.write_map_end()

    s = written(write)
    assert s == '{"true":1,"1.5":2,"NaN":3,"-7":4,"s":5,"AA==":6}'
    assert json.loads(s)["NaN"] == 3


def test_nested_containers():
    def write(p):
        p.write_list_begin(TType.MAP, 2)
        p.write_map_begin(TType.STRING, TType.LIST, 1)
        p.write_string("a")
        p.write_list_begin(TType.I32, 2)
        p.write_i32(1)
        p.write_i32(2)
        p.write_list_end()
        p.write_map_end()
        p.write_map_begin(TType.STRING, TType.LIST, 0)
        p.write_map_end()
        p.write_list_end()

    assert written(write) == '[{"a":[1,2]},{}]'


def test_write_struct_inside_message():
    def write(p):
        p.write_message_begin("ping", MessageType.CALL, 7)
        p.write_struct_begin("PingArgs")
        p.write_field_begin("id", TType.I32, 1)
        p.write_i32(5)
        p.write_field_end()
        p.write_field_begin("tags", TType.LIST, 2)
        p.write_list_begin(TType.STRING, 2)
        p.write_string("a")
        p.write_string("b")
        p.write_list_end()
        p.write_field_end()
        p.write_field_stop()
        p.write_struct_end()
        p.write_message_end()

    assert written(write) == '["ping",1,7,{"id":5,"tags":["a","b"]}]'


def test_container_as_map_key_is_format_error():
    prot = SimpleJSONProtocol(MemoryTransport())
    prot.write_map_begin(TType.LIST, TType.I32, 1)
    with pytest.raises(ProtocolFormatError):
        prot.write_list_begin(TType.I32, 0)
    with pytest.raises(ProtocolFormatError):
        prot.write_struct_begin("Key")


def test_mismatched_end_is_format_error():
    prot = SimpleJSONProtocol(MemoryTransport())
    prot.write_map_begin(TType.I32, TType.I32, 0)
    with pytest.raises(ProtocolFormatError):
        prot.write_list_end()


def test_end_without_begin_is_format_error():
    prot = SimpleJSONProtocol(MemoryTransport())
    with pytest.raises(ProtocolFormatError):
        prot.write_set_end()


def test_map_end_after_dangling_key_is_format_error():
    prot = SimpleJSONProtocol(MemoryTransport())
    prot.write_map_begin(TType.I32, TType.I32, 1)
    prot.write_i32(1)
    with pytest.raises(ProtocolFormatError):
        prot.write_map_end()


def test_field_outside_struct_and_field_end_without_value():
    prot = SimpleJSONProtocol(MemoryTransport())
    with pytest.raises(ProtocolFormatError):
        prot.write_field_begin("x", TType.I32, 1)
    prot.write_struct_begin("S")
    prot.write_field_begin("x", TType.I32, 1)
    with pytest.raises(ProtocolFormatError):
        prot.write_field_end()


def test_negative_size_is_format_error():
    prot = SimpleJSONProtocol(MemoryTransport())
    with pytest.raises(ProtocolFormatError):
        prot.write_list_begin(TType.I32, -1)


def test_writes_through_small_buffer_match_direct_output():
    value = bytes(range(256)) * 20

    def write(p):
        p.write_list_begin(TType.STRING, 2)
        p.write_binary(value)
        p.write_string("tail")
        p.write_list_end()

    direct = written(write)

    under = MemoryTransport()
    prot = SimpleJSONProtocol(BufferedTransport(under, 16))
    write(prot)
    assert len(under.getvalue()) < len(direct)
    prot.flush()
    assert under.getvalue().decode("utf-8") == direct


@pytest.mark.parametrize(
    "method,value",
    [("write_i32", 1.5), ("write_i16", "7"), ("write_i64", True), ("write_byte", None)],
)
def test_write_integer_rejects_non_int(method, value):
    trans = MemoryTransport()
    prot = SimpleJSONProtocol(trans)
    with pytest.raises(ProtocolFormatError):
        getattr(prot, method)(value)
    assert trans.getvalue() == b""


def test_top_level_values_are_space_separated():
    def write(p):
        p.write_bool(True)
        p.write_string("x")
        p.write_map_begin(TType.STRING, TType.I32, 0)
        p.write_map_end()

    assert written(write) == 'true "x" {}'
