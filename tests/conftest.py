import asyncio
import pytest
import pytest_asyncio
import os
import shutil
import tempfile
import time
from typing import AsyncIterator, Optional
from subprocess import Popen, DEVNULL

from solders.keypair import Keypair
from solana.rpc.api import Client
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed

from system.actions import airdrop
from token_metadata.constants import METADATA_PROGRAM_ID

AIRDROP_LAMPORTS: int = 10_000_000_000
MAINNET_ENDPOINT: str = "https://api.mainnet-beta.solana.com"
# Refresh with:
#   solana program dump -u m metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s tests/fixtures/mpl_token_metadata.so
# Without the dump the program is cloned from mainnet when the validator starts.
METADATA_PROGRAM_FIXTURE: str = os.path.join(os.path.dirname(__file__), "fixtures", "mpl_token_metadata.so")
STARTUP_SECONDS: int = 60


def metadata_program_args() -> list:
    if os.path.exists(METADATA_PROGRAM_FIXTURE):
        return ["--bpf-program", str(METADATA_PROGRAM_ID), METADATA_PROGRAM_FIXTURE]
    return ["--url", MAINNET_ENDPOINT, "--clone-upgradeable-program", str(METADATA_PROGRAM_ID)]


def start_validator(ledger: str, extra_args: list) -> Optional[Popen]:
    """Starts a validator and waits for its RPC, returns None if it exits first."""
    validator = Popen(["solana-test-validator", "--reset", "--quiet"] + extra_args, cwd=ledger, stdout=DEVNULL)
    client = Client(commitment=Confirmed)
    deadline = time.monotonic() + STARTUP_SECONDS
    while time.monotonic() < deadline:
        if validator.poll() is not None:
            return None
        if client.is_connected():
            return validator
        time.sleep(1.0)
    validator.kill()
    validator.wait()
    return None


@pytest.fixture(scope="session")
def solana_test_validator():
    """Local validator, yields whether the token metadata program is loaded."""
    if shutil.which("solana-test-validator") is None:
        pytest.skip("solana-test-validator is not installed")
    newpath = tempfile.mkdtemp()
    validator = start_validator(newpath, metadata_program_args())
    metadata_loaded = validator is not None
    if validator is None:
        print("Token metadata program unavailable, starting validator without it")
        validator = start_validator(newpath, [])
    if validator is None:
        shutil.rmtree(newpath)
        pytest.fail("solana-test-validator did not start")
    yield metadata_loaded
    validator.kill()
    validator.wait()
    shutil.rmtree(newpath)


@pytest.fixture
def metadata_program(solana_test_validator):
    if not solana_test_validator:
        pytest.skip(f"token metadata program could not be loaded, see {METADATA_PROGRAM_FIXTURE}")


@pytest_asyncio.fixture
async def async_client(solana_test_validator) -> AsyncIterator[AsyncClient]:
    async_client = AsyncClient(commitment=Confirmed)
    total_attempts = 20
    current_attempt = 0
    while not await async_client.is_connected():
        if current_attempt == total_attempts:
            raise Exception("Could not connect to test validator")
        else:
            current_attempt += 1
        await asyncio.sleep(1.0)
    yield async_client
    await async_client.close()


@pytest_asyncio.fixture
async def authority(async_client) -> Keypair:
    authority = Keypair()
    await airdrop(async_client, authority.pubkey(), AIRDROP_LAMPORTS)
    return authority


@pytest.fixture
def user() -> Keypair:
    return Keypair()
