from solders.keypair import Keypair

from spl.token._layouts import ACCOUNT_LAYOUT, MINT_LAYOUT

from spl_token.state import Account, AccountState, Mint
from token_metadata.state import METADATA_LAYOUT, Creator, Key, MasterEdition, Metadata


def test_token_layout_sizes():
    assert MINT_LAYOUT.sizeof() == 82
    assert ACCOUNT_LAYOUT.sizeof() == 165


def test_decode_mint():
    authority = Keypair().pubkey()
    data = MINT_LAYOUT.build(dict(
        mint_authority_option=1,
        mint_authority=bytes(authority),
        supply=1,
        decimals=0,
        is_initialized=1,
        freeze_authority_option=0,
        freeze_authority=bytes(32),
    ))
    mint = Mint.decode(data)
    assert mint.mint_authority == authority
    assert mint.supply == 1
    assert mint.decimals == 0
    assert mint.is_initialized
    assert mint.freeze_authority is None


def test_decode_account():
    mint = Keypair().pubkey()
    owner = Keypair().pubkey()
    close_authority = Keypair().pubkey()
    data = ACCOUNT_LAYOUT.build(dict(
        mint=bytes(mint),
        owner=bytes(owner),
        amount=12,
        delegate_option=0,
        delegate=bytes(32),
        state=AccountState.FROZEN,
        is_native_option=0,
        is_native=0,
        delegated_amount=0,
        close_authority_option=1,
        close_authority=bytes(close_authority),
    ))
    account = Account.decode(data)
    assert account.mint == mint
    assert account.owner == owner
    assert account.amount == 12
    assert account.delegate is None
    assert account.state == AccountState.FROZEN
    assert account.is_native is None
    assert account.close_authority == close_authority


def test_decode_metadata_strips_padding():
    update_authority = Keypair().pubkey()
    mint = Keypair().pubkey()
    creator = Keypair().pubkey()
    data = METADATA_LAYOUT.build(dict(
        key=Key.METADATA_V1,
        update_authority=bytes(update_authority),
        mint=bytes(mint),
        name="Mlabs Gold Star".ljust(32, "\x00"),
        symbol="★" + "\x00" * 7,
        uri="https://example.com/star.png".ljust(200, "\x00"),
        seller_fee_basis_points=500,
        creators_option=1,
        creators=[dict(address=bytes(creator), verified=1, share=100)],
        primary_sale_happened=0,
        is_mutable=1,
        edition_nonce_option=1,
        edition_nonce=254,
        token_standard_option=0,
        token_standard=None,
    )) + bytes(64)
    assert str(data[69:101], "utf-8")[:len("Mlabs Gold Star")] == "Mlabs Gold Star"

    metadata = Metadata.decode(data)
    assert metadata.key == Key.METADATA_V1
    assert metadata.update_authority == update_authority
    assert metadata.mint == mint
    assert metadata.data.name == "Mlabs Gold Star"
    assert metadata.data.symbol == "★"
    assert metadata.data.uri == "https://example.com/star.png"
    assert metadata.data.seller_fee_basis_points == 500
    assert metadata.data.creators == [Creator(address=creator, verified=True, share=100)]
    assert not metadata.primary_sale_happened
    assert metadata.is_mutable
    assert metadata.edition_nonce == 254
    assert metadata.token_standard is None


def test_decode_master_edition():
    data = bytes([Key.MASTER_EDITION_V2]) + (0).to_bytes(8, 'little') + bytes([1]) + (0).to_bytes(8, 'little')
    master_edition = MasterEdition.decode(data + bytes(64))
    assert master_edition.key == Key.MASTER_EDITION_V2
    assert master_edition.supply == 0
    assert master_edition.max_supply == 0


def test_decode_master_edition_unlimited():
    data = bytes([Key.MASTER_EDITION_V2]) + (3).to_bytes(8, 'little') + bytes([0])
    master_edition = MasterEdition.decode(data)
    assert master_edition.supply == 3
    assert master_edition.max_supply is None
