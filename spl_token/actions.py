from solders.pubkey import Pubkey
from solders.keypair import Keypair
from solders.transaction import Transaction
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
import solders.system_program as sys

from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token._layouts import MINT_LAYOUT
import spl.token.instructions as spl_token


OPTS = TxOpts(skip_confirmation=False, preflight_commitment=Confirmed)


async def create_associated_token_account(
    client: AsyncClient,
    payer: Keypair,
    owner: Pubkey,
    mint: Pubkey
) -> Pubkey:
    associated_token_address = spl_token.get_associated_token_address(owner, mint)
    print(f"Creating associated token account {associated_token_address} for owner {owner}")
    ix = spl_token.create_idempotent_associated_token_account(payer=payer.pubkey(), owner=owner, mint=mint)
    recent_blockhash = (await client.get_latest_blockhash()).value.blockhash
    txn = Transaction.new_signed_with_payer([ix], payer.pubkey(), [payer], recent_blockhash)
    await client.send_transaction(txn, opts=OPTS)
    return associated_token_address


async def create_mint(client: AsyncClient, payer: Keypair, mint: Keypair, mint_authority: Pubkey, decimals: int):
    resp = await client.get_minimum_balance_for_rent_exemption(MINT_LAYOUT.sizeof())
    print(f"Creating token mint {mint.pubkey()} with {decimals} decimals")
    instructions = [
        sys.create_account(
            sys.CreateAccountParams(
                from_pubkey=payer.pubkey(),
                to_pubkey=mint.pubkey(),
                lamports=resp.value,
                space=MINT_LAYOUT.sizeof(),
                owner=TOKEN_PROGRAM_ID,
            )
        ),
        spl_token.initialize_mint(
            spl_token.InitializeMintParams(
                program_id=TOKEN_PROGRAM_ID,
                mint=mint.pubkey(),
                decimals=decimals,
                mint_authority=mint_authority,
                freeze_authority=None,
            )
        ),
    ]
    recent_blockhash = (await client.get_latest_blockhash()).value.blockhash
    txn = Transaction.new_signed_with_payer(instructions, payer.pubkey(), [payer, mint], recent_blockhash)
    await client.send_transaction(txn, opts=OPTS)


async def mint_to(
    client: AsyncClient, payer: Keypair, mint: Pubkey, dest: Pubkey, authority: Keypair, amount: int
):
    print(f"Minting {amount} of {mint} into {dest}")
    ix = spl_token.mint_to(
        spl_token.MintToParams(
            program_id=TOKEN_PROGRAM_ID,
            mint=mint,
            dest=dest,
            mint_authority=authority.pubkey(),
            amount=amount,
        )
    )
    signers = [payer, authority] if payer.pubkey() != authority.pubkey() else [payer]
    recent_blockhash = (await client.get_latest_blockhash()).value.blockhash
    txn = Transaction.new_signed_with_payer([ix], payer.pubkey(), signers, recent_blockhash)
    await client.send_transaction(txn, opts=OPTS)
