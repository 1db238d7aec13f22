"""Metaplex Token Metadata Constants."""

from typing import Tuple

from solders.pubkey import Pubkey

METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
"""Public key that identifies the Metaplex Token Metadata program."""

MAX_NAME_LENGTH: int = 32
"""Maximum length of a token name, in bytes."""

MAX_SYMBOL_LENGTH: int = 10
"""Maximum length of a token symbol, in bytes."""

MAX_URI_LENGTH: int = 200
"""Maximum length of a metadata uri, in bytes."""

MAX_CREATOR_LIMIT: int = 5
"""Maximum number of creators in a metadata record."""

MAX_SELLER_FEE_BASIS_POINTS: int = 10_000
"""Royalty cap, 100% expressed in basis points."""


def find_metadata_account(
    mint_key: Pubkey
) -> Tuple[Pubkey, int]:
    """Generates the metadata account program address"""
    return Pubkey.find_program_address(
        [
            METADATA_SEED_PREFIX,
            bytes(METADATA_PROGRAM_ID),
            bytes(mint_key)
        ],
        METADATA_PROGRAM_ID
    )


def find_master_edition_account(
    mint_key: Pubkey
) -> Tuple[Pubkey, int]:
    """Generates the master edition account program address"""
    return Pubkey.find_program_address(
        [
            METADATA_SEED_PREFIX,
            bytes(METADATA_PROGRAM_ID),
            bytes(mint_key),
            EDITION_SEED,
        ],
        METADATA_PROGRAM_ID
    )


METADATA_SEED_PREFIX = b"metadata"
"""Seed used to avoid certain collision attacks."""
EDITION_SEED = b"edition"
"""Seed used to derive the edition account of a mint."""
