import pytest
from solders.keypair import Keypair
from solana.rpc.commitment import Confirmed
from solana.rpc.core import RPCException

from issuance.workflow import custom_error_code
from spl_token.actions import create_mint, create_associated_token_account, mint_to
from spl_token.state import Account, TokenError
from token_metadata.actions import create_metadata, create_master_edition
from token_metadata.constants import METADATA_PROGRAM_ID, find_metadata_account, find_master_edition_account
from token_metadata.state import Creator, Key, MasterEdition, Metadata, MetadataData


async def create_single_token(async_client, authority, user):
    mint = Keypair()
    await create_mint(async_client, authority, mint, authority.pubkey(), 0)
    account = await create_associated_token_account(async_client, authority, user.pubkey(), mint.pubkey())
    await mint_to(async_client, authority, mint.pubkey(), account, authority, 1)
    return mint.pubkey(), account


@pytest.mark.asyncio
@pytest.mark.usefixtures("metadata_program")
async def test_create_metadata_success(async_client, authority, user):
    (mint, _account) = await create_single_token(async_client, authority, user)
    data = MetadataData(
        name="test_name",
        symbol="SYM",
        uri="test_uri",
        seller_fee_basis_points=250,
        creators=[Creator(address=authority.pubkey(), verified=False, share=100)],
    )
    metadata_address = await create_metadata(async_client, authority, mint, authority, authority, data)
    assert metadata_address == find_metadata_account(mint)[0]

    resp = await async_client.get_account_info(metadata_address, commitment=Confirmed)
    assert resp.value.owner == METADATA_PROGRAM_ID
    metadata = Metadata.decode(resp.value.data)
    assert metadata.key == Key.METADATA_V1
    assert metadata.mint == mint
    assert metadata.update_authority == authority.pubkey()
    assert metadata.data.name == data.name
    assert metadata.data.symbol == data.symbol
    assert metadata.data.uri == data.uri
    assert metadata.data.seller_fee_basis_points == 250
    assert [creator.address for creator in metadata.data.creators] == [authority.pubkey()]
    assert not metadata.is_mutable


@pytest.mark.asyncio
@pytest.mark.usefixtures("metadata_program")
async def test_create_metadata_non_ascii_symbol(async_client, authority, user):
    (mint, _account) = await create_single_token(async_client, authority, user)
    data = MetadataData(name="Gold Star", symbol="★", uri="https://example.com/star.json")
    metadata_address = await create_metadata(async_client, authority, mint, authority, authority, data)
    resp = await async_client.get_account_info(metadata_address, commitment=Confirmed)
    assert Metadata.decode(resp.value.data).data.symbol == "★"


@pytest.mark.asyncio
@pytest.mark.usefixtures("metadata_program")
async def test_create_master_edition_seals_supply(async_client, authority, user):
    (mint, account) = await create_single_token(async_client, authority, user)
    data = MetadataData(name="test_name", symbol="SYM", uri="test_uri")
    await create_metadata(async_client, authority, mint, authority, authority, data)
    edition_address = await create_master_edition(async_client, authority, mint, authority, authority, 0)
    assert edition_address == find_master_edition_account(mint)[0]

    resp = await async_client.get_account_info(edition_address, commitment=Confirmed)
    assert resp.value.owner == METADATA_PROGRAM_ID
    master_edition = MasterEdition.decode(resp.value.data)
    assert master_edition.key == Key.MASTER_EDITION_V2
    assert master_edition.max_supply == 0
    assert master_edition.supply == 0

    with pytest.raises(RPCException) as excinfo:
        await mint_to(async_client, authority, mint, account, authority, 1)
    assert custom_error_code(excinfo.value) == TokenError.OWNER_MISMATCH
    resp = await async_client.get_account_info(account, commitment=Confirmed)
    assert Account.decode(resp.value.data).amount == 1
