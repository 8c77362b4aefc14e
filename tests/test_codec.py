"""Unit tests for the schema-driven value codec."""

from __future__ import annotations

import pytest
from eth_account import Account

from stele.codex import decode, decode_prefix, encode
from stele.codex import layout as L
from stele.errors import DecodeError, EncodeError

from conftest import PRIVATE_KEY

MINT = L.Struct(
    L.Fields.of_named(
        ("tokenId", L.U32),
        ("owner", L.ByteArray(32)),
    )
)

ITEMS = L.Struct(
    L.Fields.of_named(
        (
            "items",
            L.List(
                L.SizeLength.U16,
                L.Struct(L.Fields.of_named(("id", L.U64), ("label", L.String(L.SizeLength.U8)))),
            ),
        ),
    )
)

COLOR = L.Enum(
    variants=(
        ("Red", L.Fields.none()),
        ("Rgb", L.Fields.of_unnamed(L.U8, L.U8, L.U8)),
        ("Named", L.Fields.of_named(("name", L.String(L.SizeLength.U32)))),
    )
)


class TestMintScenario:
    """A two-field struct encodes to exactly the declared bytes."""

    def test_mint_is_36_bytes(self) -> None:
        owner = "ab" * 32
        encoded = encode({"tokenId": 7, "owner": owner}, MINT)
        assert len(encoded) == 36
        assert encoded[:4] == b"\x07\x00\x00\x00"
        assert encoded[4:] == bytes.fromhex(owner)

    def test_json_key_order_does_not_matter(self) -> None:
        owner = "0x" + "cd" * 32
        first = encode({"tokenId": 1, "owner": owner}, MINT)
        second = encode({"owner": owner, "tokenId": 1}, MINT)
        assert first == second

    def test_decode_mint(self) -> None:
        data = b"\x07\x00\x00\x00" + bytes(range(32))
        assert decode(data, MINT) == {"tokenId": 7, "owner": bytes(range(32)).hex()}


class TestRoundTrip:
    """decode(encode(v)) == v for representative layouts."""

    @pytest.mark.parametrize(
        "value, layout",
        [
            ({"items": [{"id": 1, "label": "a"}, {"id": 2**64 - 1, "label": "zz"}]}, ITEMS),
            ({"Red": []}, COLOR),
            ({"Rgb": [1, 2, 255]}, COLOR),
            ({"Named": {"name": "teal"}}, COLOR),
            ([[1, "one"], [2, "two"]], L.Map(L.SizeLength.U8, L.U32, L.String(L.SizeLength.U8))),
            ([-5, True], L.Pair(L.I16, L.BOOL)),
            ("340282366920938463463374607431768211455", L.U128),
            ("-170141183460469231731687303715884105728", L.I128),
            ("1000000", L.AMOUNT),
            ({"index": 12, "subindex": 0}, L.CONTRACT_ADDRESS),
            ("2024-01-02T03:04:05.678Z", L.TIMESTAMP),
            ("1d 2h 3m 4s 5ms", L.DURATION),
            ({"Some": [5]}, L.option_of(L.U32)),
            ({"None": []}, L.option_of(L.U32)),
            ({"contract": "nft"}, L.ContractName(L.SizeLength.U16)),
            ({"contract": "nft", "func": "mint"}, L.ReceiveName(L.SizeLength.U16)),
            ("300", L.ULeb128(4)),
            ("-129", L.ILeb128(4)),
            ("deadbeef", L.ByteList(L.SizeLength.U32)),
            ([3, 1, 2], L.Set(L.SizeLength.U8, L.U8)),
            ([0, 0, 7], L.Array(3, L.U16)),
            ([], L.UNIT),
        ],
    )
    def test_round_trip(self, value, layout) -> None:
        assert decode(encode(value, layout), layout, allow_trailing=False) == value

    def test_account_address_round_trip_is_checksummed(self) -> None:
        address = Account.from_key(PRIVATE_KEY).address
        encoded = encode(address.lower(), L.ACCOUNT_ADDRESS)
        assert len(encoded) == 32
        assert encoded[:12] == bytes(12)
        assert decode(encoded, L.ACCOUNT_ADDRESS) == address

    def test_full_width_account_address(self) -> None:
        value = "0x" + "11" * 32
        assert decode(encode(value, L.ACCOUNT_ADDRESS), L.ACCOUNT_ADDRESS) == value

    def test_zero_padded_full_width_address_is_canonicalised(self) -> None:
        address = Account.from_key(PRIVATE_KEY).address
        padded = "0x" + "00" * 12 + address[2:].lower()
        assert decode(encode(padded, L.ACCOUNT_ADDRESS), L.ACCOUNT_ADDRESS) == address

    def test_zero_sized_elements_at_the_limit(self) -> None:
        layout = L.List(L.SizeLength.U32, L.UNIT)
        value = [[]] * 65_536
        assert decode(encode(value, layout), layout) == value


class TestWireFormat:
    """Exact byte layouts."""

    def test_little_endian_integers(self) -> None:
        assert encode(0x0102, L.U16) == b"\x02\x01"
        assert encode(-2, L.I32) == b"\xfe\xff\xff\xff"

    def test_length_prefix_width(self) -> None:
        assert encode("hi", L.String(L.SizeLength.U16)) == b"\x02\x00hi"
        assert encode([1], L.List(L.SizeLength.U32, L.U8)) == b"\x01\x00\x00\x00\x01"

    def test_uleb128(self) -> None:
        assert encode("300", L.ULeb128(4)) == b"\xac\x02"

    def test_option(self) -> None:
        option = L.option_of(L.U32)
        assert encode({"Some": [5]}, option) == b"\x01\x05\x00\x00\x00"
        assert encode({"None": []}, option) == b"\x00"

    def test_contract_name_prefix(self) -> None:
        assert encode({"contract": "nft"}, L.ContractName(L.SizeLength.U8)) == b"\x08init_nft"

    def test_wide_enum_discriminant(self) -> None:
        wide = L.Enum(tuple((f"v{i}", L.Fields.none()) for i in range(300)))
        assert wide.discriminant_width == 2
        assert encode({"v299": []}, wide) == b"\x2b\x01"

    def test_unit_accepts_null(self) -> None:
        assert encode(None, L.UNIT) == b""


class TestEncodeRejection:
    """Kind mismatches fail with the offending path and never coerce."""

    def test_string_for_integer(self) -> None:
        with pytest.raises(EncodeError) as exc_info:
            encode({"tokenId": "7", "owner": "00" * 32}, MINT)
        assert exc_info.value.path == ("tokenId",)
        assert exc_info.value.reason == "expected integer, got string"

    def test_bool_is_not_an_integer(self) -> None:
        with pytest.raises(EncodeError, match="expected integer, got bool"):
            encode(True, L.U8)

    def test_missing_field(self) -> None:
        with pytest.raises(EncodeError) as exc_info:
            encode({"tokenId": 7}, MINT)
        assert str(exc_info.value) == "owner: missing field"

    def test_unexpected_field(self) -> None:
        with pytest.raises(EncodeError) as exc_info:
            encode({"tokenId": 7, "owner": "00" * 32, "extra": 1}, MINT)
        assert exc_info.value.path == ("extra",)

    def test_nested_path(self) -> None:
        value = {"items": [{"id": 1, "label": "a"}, {"id": "2", "label": "b"}]}
        with pytest.raises(EncodeError) as exc_info:
            encode(value, ITEMS)
        assert str(exc_info.value) == "items[1].id: expected integer, got string"

    def test_out_of_range(self) -> None:
        with pytest.raises(EncodeError, match="4294967296 out of range for u32"):
            encode({"tokenId": 2**32, "owner": "00" * 32}, MINT)

    def test_negative_unsigned(self) -> None:
        with pytest.raises(EncodeError, match="out of range for u8"):
            encode(-1, L.U8)

    def test_string_exceeds_prefix(self) -> None:
        with pytest.raises(EncodeError, match="exceeds maximum 255"):
            encode("x" * 256, L.String(L.SizeLength.U8))

    def test_fixed_array_size(self) -> None:
        with pytest.raises(EncodeError, match="expected exactly 32 bytes, got 31"):
            encode({"tokenId": 1, "owner": "00" * 31}, MINT)

    def test_u128_requires_string(self) -> None:
        with pytest.raises(EncodeError, match="expected decimal string, got number"):
            encode(5, L.U128)

    def test_unknown_variant(self) -> None:
        with pytest.raises(EncodeError) as exc_info:
            encode({"Blue": []}, COLOR)
        assert exc_info.value.path == ("Blue",)
        assert exc_info.value.reason == "unknown variant"

    def test_bad_timestamp(self) -> None:
        with pytest.raises(EncodeError, match="invalid timestamp"):
            encode("yesterday", L.TIMESTAMP)

    def test_sub_millisecond_timestamp(self) -> None:
        with pytest.raises(EncodeError, match="more precise than milliseconds"):
            encode("2024-01-02T03:04:05.678901Z", L.TIMESTAMP)

    def test_trailing_zero_fraction_is_exact(self) -> None:
        encoded = encode("2024-01-02T03:04:05.678000Z", L.TIMESTAMP)
        assert decode(encoded, L.TIMESTAMP) == "2024-01-02T03:04:05.678Z"

    def test_too_many_zero_sized_elements(self) -> None:
        with pytest.raises(EncodeError, match="zero-sized elements, the limit is 65536"):
            encode([[]] * 70_000, L.List(L.SizeLength.U32, L.UNIT))

    def test_duplicate_set_element(self) -> None:
        with pytest.raises(EncodeError, match="duplicate set element"):
            encode([1, 1], L.Set(L.SizeLength.U8, L.U8))

    def test_root_path_rendering(self) -> None:
        with pytest.raises(EncodeError) as exc_info:
            encode("nope", L.U32)
        assert str(exc_info.value).startswith("<root>: ")


class TestDecodeFailures:
    """Truncated or malformed input never yields a partial value."""

    def test_every_truncation_fails(self) -> None:
        value = {"items": [{"id": 9, "label": "abc"}, {"id": 10, "label": ""}]}
        data = encode(value, ITEMS)
        for cut in range(len(data)):
            with pytest.raises(DecodeError):
                decode(data[:cut], ITEMS)

    def test_truncation_message(self) -> None:
        with pytest.raises(DecodeError, match="need 4 bytes, only 2 left"):
            decode(b"\x01\x02", L.U32)

    def test_unknown_discriminant(self) -> None:
        with pytest.raises(DecodeError, match="unknown variant discriminant 5"):
            decode(b"\x05", COLOR)

    def test_unknown_tagged_discriminant(self) -> None:
        tagged = L.TaggedEnum(((10, "A", L.Fields.none()), (20, "B", L.Fields.none())))
        assert decode(b"\x14", tagged) == {"B": []}
        with pytest.raises(DecodeError, match="unknown variant discriminant 11"):
            decode(b"\x0b", tagged)

    def test_invalid_bool(self) -> None:
        with pytest.raises(DecodeError, match="invalid bool byte 2"):
            decode(b"\x02", L.BOOL)

    def test_invalid_utf8(self) -> None:
        with pytest.raises(DecodeError, match="invalid UTF-8"):
            decode(b"\x01\xff", L.String(L.SizeLength.U8))

    def test_implausible_count(self) -> None:
        with pytest.raises(DecodeError):
            decode(b"\xff\xff\xff\xff", L.List(L.SizeLength.U32, L.U64))

    def test_trailing_bytes(self) -> None:
        data = b"\x01\x00\x00\x00\xff"
        assert decode(data, L.U32) == 1
        assert decode_prefix(data, L.U32) == (1, 4)
        with pytest.raises(DecodeError, match="1 trailing bytes after value"):
            decode(data, L.U32, allow_trailing=False)
