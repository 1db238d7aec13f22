"""Metaplex Token Metadata State."""

from enum import IntEnum
from typing import Dict, List, NamedTuple, Optional
from construct import (  # type: ignore
    Bytes, Container, GreedyString, Prefixed, PrefixedArray, Struct, Switch, Int8ul, Int16ul, Int32ul, Int64ul, Pass
)

from solders.pubkey import Pubkey

PUBLIC_KEY_LAYOUT = Bytes(32)
BORSH_STRING = Prefixed(Int32ul, GreedyString("utf8"))


class Key(IntEnum):
    """Account discriminator stored in the first byte of every metadata program account."""

    UNINITIALIZED = 0
    EDITION_V1 = 1
    MASTER_EDITION_V1 = 2
    RESERVATION_LIST_V1 = 3
    METADATA_V1 = 4
    RESERVATION_LIST_V2 = 5
    MASTER_EDITION_V2 = 6
    EDITION_MARKER = 7
    USE_AUTHORITY_RECORD = 8
    COLLECTION_AUTHORITY_RECORD = 9
    TOKEN_OWNED_ESCROW = 10
    TOKEN_RECORD = 11
    METADATA_DELEGATE = 12
    EDITION_MARKER_V2 = 13
    HOLDER_DELEGATE = 14


class Creator(NamedTuple):
    """Creator entitled to a share of royalties."""
    address: Pubkey
    verified: bool
    share: int

    @classmethod
    def decode_container(cls, container: Container):
        return Creator(
            address=Pubkey(container['address']),
            verified=bool(container['verified']),
            share=container['share'],
        )

    def as_bytes_dict(self) -> Dict:
        return {
            'address': bytes(self.address),
            'verified': int(self.verified),
            'share': self.share,
        }


class MetadataData(NamedTuple):
    """Display attributes attached to a mint."""
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int = 0
    creators: Optional[List[Creator]] = None


def strip_padding(value: str) -> str:
    # the program pads name, symbol and uri with NUL up to their maximum length
    return value.rstrip("\x00")


def decode_optional(option: int, value):
    if option:
        return value
    else:
        return None


class Metadata(NamedTuple):
    """Metadata account and the part of its data this client reads."""
    key: Key
    update_authority: Pubkey
    mint: Pubkey
    data: MetadataData
    primary_sale_happened: bool
    is_mutable: bool
    edition_nonce: Optional[int]
    token_standard: Optional[int]

    @classmethod
    def decode(cls, data: bytes):
        parsed = METADATA_LAYOUT.parse(data)
        creators = decode_optional(parsed['creators_option'], parsed['creators'])
        return Metadata(
            key=Key(parsed['key']),
            update_authority=Pubkey(parsed['update_authority']),
            mint=Pubkey(parsed['mint']),
            data=MetadataData(
                name=strip_padding(parsed['name']),
                symbol=strip_padding(parsed['symbol']),
                uri=strip_padding(parsed['uri']),
                seller_fee_basis_points=parsed['seller_fee_basis_points'],
                creators=[Creator.decode_container(c) for c in creators] if creators is not None else None,
            ),
            primary_sale_happened=bool(parsed['primary_sale_happened']),
            is_mutable=bool(parsed['is_mutable']),
            edition_nonce=decode_optional(parsed['edition_nonce_option'], parsed['edition_nonce']),
            token_standard=decode_optional(parsed['token_standard_option'], parsed['token_standard']),
        )


class MasterEdition(NamedTuple):
    """Master edition account, capping the supply of its mint."""
    key: Key
    supply: int
    max_supply: Optional[int]

    @classmethod
    def decode(cls, data: bytes):
        parsed = MASTER_EDITION_LAYOUT.parse(data)
        return MasterEdition(
            key=Key(parsed['key']),
            supply=parsed['supply'],
            max_supply=decode_optional(parsed['max_supply_option'], parsed['max_supply']),
        )


CREATOR_LAYOUT = Struct(
    "address" / PUBLIC_KEY_LAYOUT,
    "verified" / Int8ul,
    "share" / Int8ul,
)

CREATORS_LAYOUT = PrefixedArray(Int32ul, CREATOR_LAYOUT)

METADATA_LAYOUT = Struct(
    "key" / Int8ul,
    "update_authority" / PUBLIC_KEY_LAYOUT,
    "mint" / PUBLIC_KEY_LAYOUT,
    "name" / BORSH_STRING,
    "symbol" / BORSH_STRING,
    "uri" / BORSH_STRING,
    "seller_fee_basis_points" / Int16ul,
    "creators_option" / Int8ul,
    "creators" / Switch(
        lambda this: this.creators_option,
        {
            0: Pass,
            1: CREATORS_LAYOUT,
        }),
    "primary_sale_happened" / Int8ul,
    "is_mutable" / Int8ul,
    "edition_nonce_option" / Int8ul,
    "edition_nonce" / Switch(
        lambda this: this.edition_nonce_option,
        {
            0: Pass,
            1: Int8ul,
        }),
    "token_standard_option" / Int8ul,
    "token_standard" / Switch(
        lambda this: this.token_standard_option,
        {
            0: Pass,
            1: Int8ul,
        }),
    # collection, uses and later fields are not read by this client
)

MASTER_EDITION_LAYOUT = Struct(
    "key" / Int8ul,
    "supply" / Int64ul,
    "max_supply_option" / Int8ul,
    "max_supply" / Switch(
        lambda this: this.max_supply_option,
        {
            0: Pass,
            1: Int64ul,
        }),
)
