"""Metaplex Token Metadata Instructions."""

from enum import IntEnum
from typing import NamedTuple, Optional
from construct import Struct, Switch, Int8ul, Int16ul, Int64ul, Pass  # type: ignore

from solders.pubkey import Pubkey
from solders.instruction import AccountMeta, Instruction

from token_metadata.constants import \
    MAX_NAME_LENGTH, \
    MAX_SYMBOL_LENGTH, \
    MAX_URI_LENGTH, \
    MAX_CREATOR_LIMIT, \
    MAX_SELLER_FEE_BASIS_POINTS
from token_metadata.state import BORSH_STRING, CREATORS_LAYOUT, MetadataData


class CreateMetadataAccountV3Params(NamedTuple):
    """Create a metadata account for a mint."""

    # Accounts
    program_id: Pubkey
    """Metaplex Token Metadata program account."""
    metadata: Pubkey
    """`[w]` Metadata account, derived from the mint."""
    mint: Pubkey
    """`[]` Mint of the token."""
    mint_authority: Pubkey
    """`[s]` Mint authority."""
    payer: Pubkey
    """`[s, w]` Payer for creation of the metadata account."""
    update_authority: Pubkey
    """`[]` Update authority for the metadata account, signer when `update_authority_is_signer`."""
    system_program_id: Pubkey
    """`[]` System program id."""
    rent_sysvar: Pubkey
    """`[]` Rent sysvar."""

    # Params
    data: MetadataData
    """Name, symbol, uri, royalties and creators."""
    is_mutable: bool
    """Whether the metadata can be updated later."""
    update_authority_is_signer: bool
    """Whether the update authority signs the transaction."""


class CreateMasterEditionV3Params(NamedTuple):
    """Create a master edition for a mint, capping its supply."""

    # Accounts
    program_id: Pubkey
    """Metaplex Token Metadata program account."""
    edition: Pubkey
    """`[w]` Master edition account, derived from the mint."""
    mint: Pubkey
    """`[w]` Mint of the token, its authorities move to the edition."""
    update_authority: Pubkey
    """`[s]` Update authority of the metadata."""
    mint_authority: Pubkey
    """`[s]` Current mint authority."""
    payer: Pubkey
    """`[s, w]` Payer for creation of the edition account."""
    metadata: Pubkey
    """`[w]` Metadata account of the mint."""
    token_program_id: Pubkey
    """`[]` SPL Token program id."""
    system_program_id: Pubkey
    """`[]` System program id."""
    rent_sysvar: Pubkey
    """`[]` Rent sysvar."""

    # Params
    max_supply: Optional[int]
    """Maximum number of prints, `None` for unlimited."""


class InstructionType(IntEnum):
    """Token Metadata Instruction Types used by this client."""

    CREATE_MASTER_EDITION_V3 = 17
    CREATE_METADATA_ACCOUNT_V3 = 33


DATA_V2_LAYOUT = Struct(
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
    # collection and uses are never set by this client
    "collection_option" / Int8ul,
    "uses_option" / Int8ul,
)

CREATE_METADATA_ACCOUNT_V3_LAYOUT = Struct(
    "data" / DATA_V2_LAYOUT,
    "is_mutable" / Int8ul,
    "collection_details_option" / Int8ul,
)

CREATE_MASTER_EDITION_V3_LAYOUT = Struct(
    "max_supply_option" / Int8ul,
    "max_supply" / Switch(
        lambda this: this.max_supply_option,
        {
            0: Pass,
            1: Int64ul,
        }),
)

INSTRUCTIONS_LAYOUT = Struct(
    "instruction_type" / Int8ul,
    "args"
    / Switch(
        lambda this: this.instruction_type,
        {
            InstructionType.CREATE_MASTER_EDITION_V3: CREATE_MASTER_EDITION_V3_LAYOUT,
            InstructionType.CREATE_METADATA_ACCOUNT_V3: CREATE_METADATA_ACCOUNT_V3_LAYOUT,
        },
    ),
)


def validate_metadata_data(data: MetadataData):
    """Checks the limits the metadata program enforces, lengths are in UTF-8 bytes."""
    if len(data.name.encode("utf-8")) > MAX_NAME_LENGTH:
        raise ValueError(f"Name {data.name!r} is longer than {MAX_NAME_LENGTH} bytes")
    if len(data.symbol.encode("utf-8")) > MAX_SYMBOL_LENGTH:
        raise ValueError(f"Symbol {data.symbol!r} is longer than {MAX_SYMBOL_LENGTH} bytes")
    if len(data.uri.encode("utf-8")) > MAX_URI_LENGTH:
        raise ValueError(f"Uri {data.uri!r} is longer than {MAX_URI_LENGTH} bytes")
    if not 0 <= data.seller_fee_basis_points <= MAX_SELLER_FEE_BASIS_POINTS:
        raise ValueError(f"Seller fee of {data.seller_fee_basis_points} basis points is out of range")
    if data.creators is not None:
        if len(data.creators) > MAX_CREATOR_LIMIT:
            raise ValueError(f"At most {MAX_CREATOR_LIMIT} creators are allowed, got {len(data.creators)}")
        addresses = set(creator.address for creator in data.creators)
        if len(addresses) != len(data.creators):
            raise ValueError("Creator addresses must be unique")
        total_share = sum(creator.share for creator in data.creators)
        if total_share != 100:
            raise ValueError(f"Creator shares must add up to 100, got {total_share}")


def create_metadata_account_v3(params: CreateMetadataAccountV3Params) -> Instruction:
    """Creates an instruction to create the metadata account of a mint."""
    validate_metadata_data(params.data)
    creators = params.data.creators
    data = INSTRUCTIONS_LAYOUT.build(
        dict(
            instruction_type=InstructionType.CREATE_METADATA_ACCOUNT_V3,
            args=dict(
                data=dict(
                    name=params.data.name,
                    symbol=params.data.symbol,
                    uri=params.data.uri,
                    seller_fee_basis_points=params.data.seller_fee_basis_points,
                    creators_option=0 if creators is None else 1,
                    creators=None if creators is None else [creator.as_bytes_dict() for creator in creators],
                    collection_option=0,
                    uses_option=0,
                ),
                is_mutable=int(params.is_mutable),
                collection_details_option=0,
            ),
        )
    )
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.metadata, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.mint, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.mint_authority, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.payer, is_signer=True, is_writable=True),
            AccountMeta(pubkey=params.update_authority, is_signer=params.update_authority_is_signer,
                        is_writable=False),
            AccountMeta(pubkey=params.system_program_id, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.rent_sysvar, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=data,
    )


def create_master_edition_v3(params: CreateMasterEditionV3Params) -> Instruction:
    """Creates an instruction to create the master edition of a mint."""
    data = INSTRUCTIONS_LAYOUT.build(
        dict(
            instruction_type=InstructionType.CREATE_MASTER_EDITION_V3,
            args=dict(
                max_supply_option=0 if params.max_supply is None else 1,
                max_supply=params.max_supply,
            ),
        )
    )
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.edition, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.mint, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.update_authority, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.mint_authority, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.payer, is_signer=True, is_writable=True),
            AccountMeta(pubkey=params.metadata, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.token_program_id, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.system_program_id, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.rent_sysvar, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=data,
    )
