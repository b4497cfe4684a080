from concurrent.futures import ThreadPoolExecutor

import pytest

from bencodec import (BencodeDecodeError, BencodeError, BencodeIOError,
                      dumps, loads)


TREES = [
    {},
    {b"": b""},
    {b"bar": b"spam", b"foo": 42},
    {b"int": [0, -1, 1, 2 ** 64 - 1, -2 ** 63, 2 ** 63 - 1, 2 ** 63]},
    {b"nested": {b"list": [[], [[]], {}, {b"k": [b"v"]}]}},
    {b"binary": bytes(range(256)), b"\x00\xff": b"e:d"},
    {b"z": 1, b"a": 2, b"m": {b"y": [b"x"], b"b": {}}},
]


class TestRoundTrip:
    @pytest.mark.parametrize("tree", TREES)
    def test_decode_encoded(self, tree):
        assert loads(dumps(tree)) == tree

    @pytest.mark.parametrize("tree", TREES)
    def test_encoding_is_stable(self, tree):
        encoded = dumps(tree)
        assert dumps(loads(encoded)) == encoded

    @pytest.mark.parametrize("tree", TREES)
    def test_encoding_is_canonical(self, tree):
        encoded = dumps(tree)
        assert loads(encoded, strict=True) == tree

    @pytest.mark.parametrize("number", [2 ** 64 - 1, -2 ** 63])
    def test_integer_bounds(self, number):
        assert loads(dumps({b"n": number})) == {b"n": number}

    @pytest.mark.parametrize("data", [
        b"d1:ni18446744073709551616ee",
        b"d1:ni-9223372036854775809ee"
    ])
    def test_integer_out_of_bounds(self, data):
        with pytest.raises(BencodeDecodeError, match="does not fit 64 bits"):
            loads(data)

    def test_empty_containers(self):
        assert loads(b"de") == {}
        assert loads(b"d1:alee") == {b"a": []}
        assert dumps({}) == b"de"
        assert dumps({b"a": []}) == b"d1:alee"

    @pytest.mark.parametrize("data, canonical", [
        (b"d1:bi1e1:ai2ee", b"d1:ai2e1:bi1ee"),
        (b"d1:ai007ee", b"d1:ai7ee"),
        (b"d1:ai-0ee", b"d1:ai0ee"),
        (b"d1:a02:xye", b"d1:a2:xye"),
        (b"d1:ai1e1:ai2ee", b"d1:ai2ee")
    ])
    def test_non_canonical_input(self, data, canonical):
        assert dumps(loads(data)) == canonical
        with pytest.raises(BencodeDecodeError):
            loads(data, strict=True)

    @pytest.mark.parametrize("data", [
        b"d3:foo",
        b"d3:fooi42e",
        b"d3:foo4:sp",
        b"d3:fool",
        b"d"
    ])
    def test_truncated(self, data):
        with pytest.raises(BencodeIOError):
            loads(data)

    @pytest.mark.parametrize("data", [
        b"",
        b"l",
        b"d3:fooxe",
        b"d3:fooi4x2ee",
        b"d3:foo-1:ae"
    ])
    def test_never_returns_partial(self, data):
        with pytest.raises(BencodeError):
            loads(data)

    def test_concurrent_decoding(self):
        documents = [dumps(tree) for tree in TREES] * 10
        with ThreadPoolExecutor(max_workers=4) as executor:
            decoded = list(executor.map(loads, documents))
        assert decoded == TREES * 10
