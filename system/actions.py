from solders.pubkey import Pubkey
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed


async def airdrop(client: AsyncClient, receiver: Pubkey, lamports: int):
    print(f"Airdropping {lamports} lamports to {receiver}...")
    resp = await client.request_airdrop(receiver, lamports, commitment=Confirmed)
    await client.confirm_transaction(resp.value, commitment=Confirmed)


async def fund(client: AsyncClient, receiver: Pubkey, lamports: int) -> int:
    """Tops `receiver` up to at least `lamports`, airdropping only the shortfall.

    Returns the number of lamports airdropped.
    """
    resp = await client.get_balance(receiver, commitment=Confirmed)
    shortfall = lamports - resp.value
    if shortfall <= 0:
        print(f"{receiver} already holds {resp.value} lamports")
        return 0
    await airdrop(client, receiver, shortfall)
    return shortfall
