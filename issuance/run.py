import argparse
import asyncio
import json

from solders.keypair import Keypair
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed

from issuance.workflow import GOLD_STAR, run
from system.actions import fund
from token_metadata.instructions import validate_metadata_data
from token_metadata.state import MetadataData


LAMPORTS_PER_SOL: int = 1_000_000_000
TESTNET_ENDPOINT: str = 'https://api.testnet.solana.com'


async def get_client(endpoint: str) -> AsyncClient:
    print(f'Connecting to network at {endpoint}')
    async_client = AsyncClient(endpoint=endpoint, commitment=Confirmed)
    total_attempts = 10
    current_attempt = 0
    while not await async_client.is_connected():
        if current_attempt == total_attempts:
            await async_client.close()
            raise Exception(f"Could not connect to {endpoint}")
        else:
            current_attempt += 1
        await asyncio.sleep(1)
    return async_client


def keypair_from_file(keyfile_name: str) -> Keypair:
    """Reads a keypair stored as a JSON array of 64 secret key bytes."""
    with open(keyfile_name, 'r') as keyfile:
        int_list = json.load(keyfile)
    return Keypair.from_bytes(bytes(int_list))


async def main(endpoint: str, authority: Keypair, user: Keypair, airdrop_amount: float, metadata: MetadataData):
    validate_metadata_data(metadata)
    async_client = await get_client(endpoint)
    try:
        if airdrop_amount > 0:
            await fund(async_client, authority.pubkey(), int(airdrop_amount * LAMPORTS_PER_SOL))
        issuance = await run(async_client, authority, user, metadata)
    finally:
        await async_client.close()
    print(f'Mint: {issuance.mint}')
    print(f'Token account: {issuance.token_account}')
    print(f'Metadata: {issuance.metadata}')
    print(f'Master edition: {issuance.master_edition}')
    print('Done')


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description='Issue a token, attach metadata, seal it with a master edition and check it cannot be minted.')
    parser.add_argument('--endpoint', metavar='ENDPOINT_URL', type=str,
                        default=TESTNET_ENDPOINT,
                        help=f'RPC endpoint to use, e.g. {TESTNET_ENDPOINT}')
    parser.add_argument('--authority', metavar='AUTHORITY_KEYPAIR', type=str,
                        default='./authority.keypair',
                        help='Payer, mint and update authority, given by a keypair file')
    parser.add_argument('--user', metavar='USER_KEYPAIR', type=str,
                        default='./user.keypair',
                        help='Owner of the token account receiving the token, given by a keypair file')
    parser.add_argument('--airdrop', metavar='AMOUNT', type=float, default=0.0,
                        help='Top the authority up to this many SOL before starting, e.g. 1.5')
    parser.add_argument('--name', type=str, default=GOLD_STAR.name, help='Token name')
    parser.add_argument('--symbol', type=str, default=GOLD_STAR.symbol, help='Token symbol')
    parser.add_argument('--uri', type=str, default=GOLD_STAR.uri, help='Token metadata uri')

    args = parser.parse_args()
    authority = keypair_from_file(args.authority)
    user = keypair_from_file(args.user)
    metadata = GOLD_STAR._replace(name=args.name, symbol=args.symbol, uri=args.uri)
    print(f'Authority public key: {authority.pubkey()}')
    print(f'User public key: {user.pubkey()}')
    asyncio.run(main(args.endpoint, authority, user, args.airdrop, metadata))
