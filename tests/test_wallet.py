import json

import pytest

from kaizen.utils import Pubkey
from kaizen.wallet import Adapter, Wallet


@pytest.fixture
def keypair_file(tmp_path):
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(range(64))))
    return path


def test_pubkey_is_public_half_of_keypair(keypair_file):
    wallet = Wallet.from_keypair_file(keypair_file)
    assert wallet.pubkey == Pubkey(bytes(range(32, 64)))
    assert wallet.keypair == bytes(range(64))


def test_default_path_is_under_home(tmp_path, monkeypatch):
    target = tmp_path / ".config" / "solana"
    target.mkdir(parents=True)
    (target / "id.json").write_text(json.dumps([9] * 64))
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    wallet = Wallet.from_keypair_file()
    assert wallet.pubkey == Pubkey(bytes([9]) * 32)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Wallet.from_keypair_file(tmp_path / "absent.json")


def test_wrong_length_raises(tmp_path):
    path = tmp_path / "short.json"
    path.write_text(json.dumps([1] * 10))
    with pytest.raises(ValueError):
        Wallet.from_keypair_file(path)


def test_non_byte_values_raise(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([300] * 64))
    with pytest.raises(ValueError):
        Wallet.from_keypair_file(path)


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("not json")
    with pytest.raises(ValueError):
        Wallet.from_keypair_file(path)


def test_repr_hides_keypair(keypair_file):
    wallet = Wallet.from_keypair_file(keypair_file)
    assert "keypair" not in repr(wallet)


def test_local_wallet_is_connected(keypair_file):
    assert Wallet.from_keypair_file(keypair_file).is_connected() is True


@pytest.mark.asyncio
async def test_local_wallet_has_no_adapters(keypair_file):
    wallet = Wallet.from_keypair_file(keypair_file)
    assert await wallet.get_adapter_list() is None


@pytest.mark.asyncio
async def test_connect_succeeds_with_or_without_adapter(keypair_file):
    wallet = Wallet.from_keypair_file(keypair_file)
    adapter = Adapter(name="example", icon="", index=0, detected=False)
    assert await wallet.connect(adapter) is None
    assert await wallet.connect() is None
    assert wallet.is_connected() is True