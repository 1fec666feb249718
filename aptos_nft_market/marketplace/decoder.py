import re

from typing import Any, Sequence

from aptos_nft_market.marketplace.models import NFT, RawNFTRecord
from aptos_nft_market.utils.errors import DecodeError
from aptos_nft_market.utils.general_utils import octas_to_apt

HEX_PREFIX = "0x"
HEX_DIGITS_REGEX = re.compile(r"[0-9a-fA-F]*")

NFT_RECORD_FIELDS = (
    "id",
    "owner",
    "name",
    "description",
    "uri",
    "price",
    "for_sale",
    "rarity",
)


def encode_hex_field(text: str) -> str:
    return HEX_PREFIX + text.encode("utf-8").hex()


def decode_hex_field(value: Any, field: str = "field") -> str:
    if not isinstance(value, str) or not value.startswith(HEX_PREFIX):
        raise DecodeError(f"{field} is not a 0x-prefixed hex string: {value!r}", field)

    hex_string = value[len(HEX_PREFIX) :]
    if len(hex_string) % 2 != 0:
        raise DecodeError(f"{field} has an odd number of hex digits", field)
    if not HEX_DIGITS_REGEX.fullmatch(hex_string):
        raise DecodeError(f"{field} contains non-hex characters", field)

    raw_bytes = bytes(
        int(hex_string[i : i + 2], 16) for i in range(0, len(hex_string), 2)
    )
    try:
        return raw_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"{field} is not valid UTF-8: {e}", field) from e


def decode_u64(value: Any, field: str) -> int:
    # u64 values come back from the fullnode as decimal strings
    if isinstance(value, bool):
        raise DecodeError(f"{field} is not an integer: {value!r}", field)
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{field} is not an integer: {value!r}", field) from e
    if number < 0:
        raise DecodeError(f"{field} cannot be negative: {value!r}", field)
    return number


def decode_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    raise DecodeError(f"{field} is not a boolean: {value!r}", field)


def decode_nft_resource_entry(raw: RawNFTRecord) -> NFT:
    missing = [name for name in NFT_RECORD_FIELDS if name not in raw]
    if missing:
        raise DecodeError(f"NFT record is missing fields: {missing}")

    return NFT(
        id=decode_u64(raw["id"], "id"),
        owner=raw["owner"],
        name=decode_hex_field(raw["name"], "name"),
        description=decode_hex_field(raw["description"], "description"),
        uri=decode_hex_field(raw["uri"], "uri"),
        price=octas_to_apt(decode_u64(raw["price"], "price")),
        for_sale=decode_bool(raw["for_sale"], "for_sale"),
        rarity=decode_u64(raw["rarity"], "rarity"),
    )


def decode_nft_details(values: Sequence[Any]) -> NFT:
    # get_nft_details returns (id, owner, name, description, uri, price, for_sale, rarity)
    if len(values) != len(NFT_RECORD_FIELDS):
        raise DecodeError(
            f"Expected {len(NFT_RECORD_FIELDS)} values from get_nft_details, got {len(values)}"
        )
    return decode_nft_resource_entry(dict(zip(NFT_RECORD_FIELDS, values)))
