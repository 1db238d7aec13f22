"""SPL Token State."""

from enum import IntEnum
from typing import NamedTuple, Optional

from solders.pubkey import Pubkey
from spl.token._layouts import ACCOUNT_LAYOUT, MINT_LAYOUT


def decode_coption_pubkey(tag: int, value: bytes) -> Optional[Pubkey]:
    if tag:
        return Pubkey(value)
    else:
        return None


class AccountState(IntEnum):
    """Lifecycle state of a token account."""

    UNINITIALIZED = 0
    """Account is not yet initialized."""
    INITIALIZED = 1
    """Account is initialized and usable."""
    FROZEN = 2
    """Account has been frozen by the mint freeze authority."""


class TokenError(IntEnum):
    """Custom error codes returned by the token program."""

    NOT_RENT_EXEMPT = 0
    INSUFFICIENT_FUNDS = 1
    INVALID_MINT = 2
    MINT_MISMATCH = 3
    OWNER_MISMATCH = 4
    """Signer is not the expected authority, e.g. a mint authority moved to a master edition."""
    FIXED_SUPPLY = 5
    """Mint has no mint authority left."""


class Mint(NamedTuple):
    """Token mint and all its data."""
    mint_authority: Optional[Pubkey]
    supply: int
    decimals: int
    is_initialized: bool
    freeze_authority: Optional[Pubkey]

    @classmethod
    def decode(cls, data: bytes):
        parsed = MINT_LAYOUT.parse(data)
        return Mint(
            mint_authority=decode_coption_pubkey(parsed['mint_authority_option'], parsed['mint_authority']),
            supply=parsed['supply'],
            decimals=parsed['decimals'],
            is_initialized=bool(parsed['is_initialized']),
            freeze_authority=decode_coption_pubkey(parsed['freeze_authority_option'], parsed['freeze_authority']),
        )


class Account(NamedTuple):
    """Token account holding one owner's balance of one mint."""
    mint: Pubkey
    owner: Pubkey
    amount: int
    delegate: Optional[Pubkey]
    state: AccountState
    is_native: Optional[int]
    delegated_amount: int
    close_authority: Optional[Pubkey]

    @classmethod
    def decode(cls, data: bytes):
        parsed = ACCOUNT_LAYOUT.parse(data)
        return Account(
            mint=Pubkey(parsed['mint']),
            owner=Pubkey(parsed['owner']),
            amount=parsed['amount'],
            delegate=decode_coption_pubkey(parsed['delegate_option'], parsed['delegate']),
            state=AccountState(parsed['state']),
            is_native=parsed['is_native'] if parsed['is_native_option'] else None,
            delegated_amount=parsed['delegated_amount'],
            close_authority=decode_coption_pubkey(parsed['close_authority_option'], parsed['close_authority']),
        )

