from typing import List, Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.sysvar import RENT
from solders.transaction import Transaction
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
import solders.system_program as sys

from spl.token.constants import TOKEN_PROGRAM_ID

from token_metadata.constants import METADATA_PROGRAM_ID, find_metadata_account, find_master_edition_account
from token_metadata.state import MetadataData
import token_metadata.instructions as tm


OPTS = TxOpts(skip_confirmation=False, preflight_commitment=Confirmed)


def unique_signers(*keypairs: Keypair) -> List[Keypair]:
    signers: List[Keypair] = []
    for keypair in keypairs:
        if all(keypair.pubkey() != signer.pubkey() for signer in signers):
            signers.append(keypair)
    return signers


async def create_metadata(
    client: AsyncClient, payer: Keypair, mint: Pubkey, mint_authority: Keypair,
    update_authority: Keypair, data: MetadataData, is_mutable: bool = False
) -> Pubkey:
    (metadata, _seed) = find_metadata_account(mint)
    print(f"Creating metadata {metadata} for mint {mint}")
    ix = tm.create_metadata_account_v3(
        tm.CreateMetadataAccountV3Params(
            program_id=METADATA_PROGRAM_ID,
            metadata=metadata,
            mint=mint,
            mint_authority=mint_authority.pubkey(),
            payer=payer.pubkey(),
            update_authority=update_authority.pubkey(),
            system_program_id=sys.ID,
            rent_sysvar=RENT,
            data=data,
            is_mutable=is_mutable,
            update_authority_is_signer=True,
        )
    )
    signers = unique_signers(payer, mint_authority, update_authority)
    recent_blockhash = (await client.get_latest_blockhash()).value.blockhash
    txn = Transaction.new_signed_with_payer([ix], payer.pubkey(), signers, recent_blockhash)
    await client.send_transaction(txn, opts=OPTS)
    return metadata


async def create_master_edition(
    client: AsyncClient, payer: Keypair, mint: Pubkey, mint_authority: Keypair,
    update_authority: Keypair, max_supply: Optional[int]
) -> Pubkey:
    (metadata, _seed) = find_metadata_account(mint)
    (edition, _seed) = find_master_edition_account(mint)
    print(f"Creating master edition {edition} for mint {mint}, max supply {max_supply}")
    ix = tm.create_master_edition_v3(
        tm.CreateMasterEditionV3Params(
            program_id=METADATA_PROGRAM_ID,
            edition=edition,
            mint=mint,
            update_authority=update_authority.pubkey(),
            mint_authority=mint_authority.pubkey(),
            payer=payer.pubkey(),
            metadata=metadata,
            token_program_id=TOKEN_PROGRAM_ID,
            system_program_id=sys.ID,
            rent_sysvar=RENT,
            max_supply=max_supply,
        )
    )
    signers = unique_signers(payer, mint_authority, update_authority)
    recent_blockhash = (await client.get_latest_blockhash()).value.blockhash
    txn = Transaction.new_signed_with_payer([ix], payer.pubkey(), signers, recent_blockhash)
    await client.send_transaction(txn, opts=OPTS)
    return edition
