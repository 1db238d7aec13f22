"""Token issuance workflow.

Creates a mint, an associated token account, mints into it, attaches metadata
and seals the mint with a master edition, verifying the on-chain state after
every step. The last step checks that the sealed mint rejects further minting.
"""

from enum import IntEnum
from typing import Any, Awaitable, NamedTuple, Optional, TypeVar

from solders.account import Account as RawAccount
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.core import RPCException

from spl.token.constants import TOKEN_PROGRAM_ID

from spl_token.actions import create_associated_token_account, create_mint, mint_to
from spl_token.state import Account, AccountState, Mint, TokenError
from token_metadata.actions import create_master_edition, create_metadata
from token_metadata.constants import METADATA_PROGRAM_ID
from token_metadata.instructions import validate_metadata_data
from token_metadata.state import Key, MasterEdition, Metadata, MetadataData

T = TypeVar("T")

SEALED_SUPPLY_ERRORS = (TokenError.OWNER_MISMATCH, TokenError.FIXED_SUPPLY)
"""Token program errors expected when minting after the master edition took the mint authority."""

GOLD_STAR = MetadataData(
    name="Mlabs Gold Star",
    symbol="★",
    uri="https://upload.wikimedia.org/wikipedia/commons/thumb/2/29/Gold_Star.svg/1024px-Gold_Star.svg.png",
    seller_fee_basis_points=0,
    creators=None,
)
"""Metadata issued by default."""


class Step(IntEnum):
    """Steps of the issuance workflow, in execution order."""

    CREATE_MINT = 1
    CREATE_TOKEN_ACCOUNT = 2
    MINT_TOKENS = 3
    CREATE_METADATA = 4
    CREATE_MASTER_EDITION = 5
    CHECK_SUPPLY_SEALED = 6

    @property
    def description(self) -> str:
        return self.name.lower().replace("_", " ")


class StepError(Exception):
    """A workflow step failed, `cause` carries the remote error or the failed check."""

    def __init__(self, step: Step, cause: Exception):
        super().__init__(f"Step {step.value} ({step.description}) failed: {cause}")
        self.step = step
        self.cause = cause


class VerificationError(Exception):
    """On-chain state does not match what the step requested."""


class Issuance(NamedTuple):
    """Addresses of everything created by a successful run."""
    mint: Pubkey
    token_account: Pubkey
    metadata: Pubkey
    master_edition: Pubkey


def check(what: str, actual: Any, expected: Any):
    if actual != expected:
        raise VerificationError(f"{what}: expected {expected}, got {actual}")


async def fetch_account(client: AsyncClient, address: Pubkey) -> RawAccount:
    resp = await client.get_account_info(address, commitment=Confirmed)
    if resp.value is None:
        raise VerificationError(f"Account {address} does not exist")
    return resp.value


async def fetch_token_account(client: AsyncClient, address: Pubkey) -> Account:
    account = await fetch_account(client, address)
    check(f"owner program of token account {address}", account.owner, TOKEN_PROGRAM_ID)
    return Account.decode(account.data)


async def run_step(step: Step, operation: Awaitable[T]) -> T:
    print(f"Step {step.value}/{len(Step)}: {step.description}")
    try:
        return await operation
    except (RPCException, SolanaRpcException, VerificationError) as e:
        raise StepError(step, e) from e


async def issue_mint(client: AsyncClient, authority: Keypair, decimals: int) -> Pubkey:
    mint = Keypair()
    await create_mint(client, authority, mint, authority.pubkey(), decimals)

    account = await fetch_account(client, mint.pubkey())
    check("owner program of mint", account.owner, TOKEN_PROGRAM_ID)
    mint_data = Mint.decode(account.data)
    check("mint authority", mint_data.mint_authority, authority.pubkey())
    check("supply", mint_data.supply, 0)
    check("decimals", mint_data.decimals, decimals)
    check("is initialized", mint_data.is_initialized, True)
    check("freeze authority", mint_data.freeze_authority, None)
    return mint.pubkey()


async def issue_token_account(client: AsyncClient, authority: Keypair, mint: Pubkey, owner: Pubkey) -> Pubkey:
    address = await create_associated_token_account(client, authority, owner, mint)

    account_data = await fetch_token_account(client, address)
    check("mint", account_data.mint, mint)
    check("owner", account_data.owner, owner)
    check("amount", account_data.amount, 0)
    check("delegate", account_data.delegate, None)
    check("state", account_data.state, AccountState.INITIALIZED)
    check("is native", account_data.is_native, None)
    check("delegated amount", account_data.delegated_amount, 0)
    check("close authority", account_data.close_authority, None)
    return address


async def issue_tokens(client: AsyncClient, authority: Keypair, mint: Pubkey, account: Pubkey, amount: int):
    before = await fetch_token_account(client, account)
    await mint_to(client, authority, mint, account, authority, amount)

    after = await fetch_token_account(client, account)
    check("amount", after.amount, before.amount + amount)
    check("token account", after, before._replace(amount=before.amount + amount))


async def attach_metadata(client: AsyncClient, authority: Keypair, mint: Pubkey, data: MetadataData) -> Pubkey:
    address = await create_metadata(client, authority, mint, authority, authority, data)

    account = await fetch_account(client, address)
    check("owner program of metadata", account.owner, METADATA_PROGRAM_ID)
    metadata = Metadata.decode(account.data)
    check("metadata key", metadata.key, Key.METADATA_V1)
    check("metadata mint", metadata.mint, mint)
    check("update authority", metadata.update_authority, authority.pubkey())
    check("name", metadata.data.name, data.name)
    check("symbol", metadata.data.symbol, data.symbol)
    check("uri", metadata.data.uri, data.uri)
    check("seller fee basis points", metadata.data.seller_fee_basis_points, data.seller_fee_basis_points)
    return address


async def seal_master_edition(client: AsyncClient, authority: Keypair, mint: Pubkey, max_supply: int) -> Pubkey:
    address = await create_master_edition(client, authority, mint, authority, authority, max_supply)

    account = await fetch_account(client, address)
    check("owner program of master edition", account.owner, METADATA_PROGRAM_ID)
    master_edition = MasterEdition.decode(account.data)
    check("master edition key", master_edition.key, Key.MASTER_EDITION_V2)
    check("max supply", master_edition.max_supply, max_supply)
    check("edition supply", master_edition.supply, 0)
    return address


def custom_error_code(error: RPCException) -> Optional[int]:
    """Custom program error code of a failed preflight simulation, if there is one."""
    message = error.args[0] if error.args else None
    simulation = getattr(message, "data", None)
    transaction_error = getattr(simulation, "err", None)
    instruction_error = getattr(transaction_error, "err", None)
    return getattr(instruction_error, "code", None)


async def check_supply_sealed(
    client: AsyncClient, authority: Keypair, mint: Pubkey, account: Pubkey, amount: int
) -> RPCException:
    """Attempts another mint and returns the rejection, raising if the mint went through.

    Only a token program authority error counts as the expected rejection, any
    other RPC error is re-raised.
    """
    before = await fetch_token_account(client, account)
    try:
        await mint_to(client, authority, mint, account, authority, amount)
    except RPCException as e:
        if custom_error_code(e) not in SEALED_SUPPLY_ERRORS:
            raise
        print(f"Mint rejected as expected: {e}")
        rejection = e
    else:
        raise VerificationError(f"Mint {mint} accepted {amount} more tokens after its master edition was created")

    after = await fetch_token_account(client, account)
    check("amount after rejected mint", after.amount, before.amount)
    return rejection


async def run(
    client: AsyncClient, authority: Keypair, user: Keypair,
    data: MetadataData = GOLD_STAR, decimals: int = 0, amount: int = 1
) -> Issuance:
    # metadata is rejected locally before anything is spent
    validate_metadata_data(data)
    mint = await run_step(Step.CREATE_MINT, issue_mint(client, authority, decimals))
    token_account = await run_step(
        Step.CREATE_TOKEN_ACCOUNT, issue_token_account(client, authority, mint, user.pubkey()))
    await run_step(Step.MINT_TOKENS, issue_tokens(client, authority, mint, token_account, amount))
    metadata = await run_step(Step.CREATE_METADATA, attach_metadata(client, authority, mint, data))
    master_edition = await run_step(Step.CREATE_MASTER_EDITION, seal_master_edition(client, authority, mint, 0))
    await run_step(Step.CHECK_SUPPLY_SEALED, check_supply_sealed(client, authority, mint, token_account, amount))
    return Issuance(
        mint=mint,
        token_account=token_account,
        metadata=metadata,
        master_edition=master_edition,
    )
