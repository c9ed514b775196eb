# tests/test_cli.py
import json
from pathlib import Path
from typing import Generator

import pytest
from typer.testing import CliRunner

from starledger.cli.main import app
from starledger.crypto.keys import WalletKeyPair, verify_signature
from starledger.registry import StarRegistry

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    monkeypatch.delenv("STARLEDGER_SNAPSHOT", raising=False)
    monkeypatch.delenv("STARLEDGER_VALIDITY_WINDOW", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def temp_snapshot(tmp_path: Path) -> Generator[Path, None, None]:
    """Temporary snapshot file + auto-cleanup."""
    path = tmp_path / "chain.jsonl"
    yield path
    if path.exists():
        path.unlink()


@pytest.fixture
def populated_snapshot(temp_snapshot: Path):
    """Snapshot with genesis + 2 stars from one owner."""
    wallet = WalletKeyPair.generate()
    registry = StarRegistry()
    for i in range(2):
        message = registry.request_challenge(wallet.address())
        registry.submit_proof(wallet.address(), message, wallet.sign_message(message), {"ra": f"{i}h", "dec": f"{i}°"})
    registry.export_chain(temp_snapshot)
    return temp_snapshot, wallet.address()


def test_challenge():
    result = runner.invoke(app, ["challenge", "addr-A"])
    assert result.exit_code == 0
    fields = result.output.strip().split(":")
    assert fields[0] == "addr-A"
    assert fields[1].isdigit()
    assert fields[2] == "starRegistry"


def test_challenge_rejects_blank_address():
    result = runner.invoke(app, ["challenge", "  "])
    assert result.exit_code == 1
    assert "Not a valid address" in result.output


def test_keygen_and_sign_roundtrip():
    keygen = runner.invoke(app, ["keygen"])
    assert keygen.exit_code == 0
    lines = dict(line.split(":", 1) for line in keygen.output.splitlines() if line.startswith(("address:", "seed:")))
    address, seed = lines["address"].strip(), lines["seed"].strip()

    message = f"{address}:1700000000:starRegistry"
    signed = runner.invoke(app, ["sign", seed, message])
    assert signed.exit_code == 0
    assert verify_signature(message, address, signed.output.strip())


def test_sign_invalid_seed():
    result = runner.invoke(app, ["sign", "nope", "msg"])
    assert result.exit_code == 1
    assert "Invalid seed" in result.output


def test_verify_no_snapshot():
    result = runner.invoke(app, ["verify"])
    assert result.exit_code == 1
    assert "Snapshot file not found" in result.output


def test_demo_writes_valid_snapshot(temp_snapshot: Path):
    result = runner.invoke(app, ["demo", "--snapshot", str(temp_snapshot), "--stars", "3"])
    assert result.exit_code == 0
    assert "Exported 4 blocks" in result.output
    assert len(temp_snapshot.read_text(encoding="utf-8").splitlines()) == 4

    verified = runner.invoke(app, ["verify", "--snapshot", str(temp_snapshot)])
    assert verified.exit_code == 0
    assert "Valid chain (4 blocks)" in verified.output


def test_snapshot_from_env(monkeypatch, populated_snapshot):
    path, _ = populated_snapshot
    monkeypatch.setenv("STARLEDGER_SNAPSHOT", str(path))
    result = runner.invoke(app, ["verify"])
    assert result.exit_code == 0


def test_blocks_table(populated_snapshot):
    path, _ = populated_snapshot
    result = runner.invoke(app, ["blocks", "--snapshot", str(path)])
    assert result.exit_code == 0
    assert "Blocks" in result.output
    assert "Genesis" in result.output


def test_stars_for_owner(populated_snapshot):
    path, address = populated_snapshot
    result = runner.invoke(app, ["stars", address, "--snapshot", str(path)])
    assert result.exit_code == 0
    assert "#1" in result.output
    assert "#2" in result.output
    assert '"ra":"0h"' in result.output

    nobody = runner.invoke(app, ["stars", "nobody", "--snapshot", str(path)])
    assert "No stars found" in nobody.output


def test_verify_detects_tampering(populated_snapshot):
    path, _ = populated_snapshot
    rows = [json.loads(l) for l in path.read_text(encoding="utf-8").splitlines()]
    rows[2]["time"] = 0
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n", encoding="utf-8")

    result = runner.invoke(app, ["verify", "--snapshot", str(path)])
    assert result.exit_code == 1
    assert "Verification failed" in result.output
    assert "hash" in result.output


def test_corrupt_snapshot_file(temp_snapshot: Path):
    temp_snapshot.write_text("garbage\n", encoding="utf-8")
    result = runner.invoke(app, ["blocks", "--snapshot", str(temp_snapshot)])
    assert result.exit_code == 1
    assert "Failed to read snapshot" in result.output


def test_demo_bad_window(monkeypatch, temp_snapshot: Path):
    monkeypatch.setenv("STARLEDGER_VALIDITY_WINDOW", "soon")
    result = runner.invoke(app, ["demo", "--snapshot", str(temp_snapshot)])
    assert result.exit_code == 1


def test_blocks_with_non_string_hash(populated_snapshot):
    path, _ = populated_snapshot
    rows = [json.loads(l) for l in path.read_text(encoding="utf-8").splitlines()]
    rows[1]["hash"] = 12345
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n", encoding="utf-8")

    result = runner.invoke(app, ["blocks", "--snapshot", str(path)])
    assert result.exit_code == 0
    assert "12345" in result.output

    verified = runner.invoke(app, ["verify", "--snapshot", str(path)])
    assert verified.exit_code == 1


def test_stars_keep_large_numbers(temp_snapshot: Path):
    wallet = WalletKeyPair.generate()
    registry = StarRegistry()
    message = registry.request_challenge(wallet.address())
    registry.submit_proof(wallet.address(), message, wallet.sign_message(message), {"n": 2**60})
    registry.export_chain(temp_snapshot)

    result = runner.invoke(app, ["stars", wallet.address(), "--snapshot", str(temp_snapshot)])
    assert result.exit_code == 0
    assert str(2**60) in result.output


def test_keygen_output_is_plain_punctuation():
    result = runner.invoke(app, ["keygen"])
    assert result.exit_code == 0
    assert "—" not in result.output
    assert "Keep the seed private." in result.output
