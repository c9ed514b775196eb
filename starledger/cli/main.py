# starledger/cli/main.py
"""
CLI for issuing challenges and for inspecting, verifying and producing
star ledger snapshots.
"""

import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from starledger.chain.blockchain import owned_stars
from starledger.core.errors import LedgerError
from starledger.core.types import payload_json
from starledger.crypto.keys import WalletKeyPair
from starledger.ownership.verification import VALIDITY_WINDOW_SECONDS
from starledger.registry import StarRegistry
from starledger.storage import load_jsonl
from starledger.verify.validator import ChainValidator

app = typer.Typer(
    name="starledger",
    help="Issue ownership challenges and inspect, verify or export star ledger snapshots",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def get_snapshot_path(snapshot_flag: Optional[Path] = None) -> Path:
    """Resolve snapshot path in this order:
    1. --snapshot flag
    2. STARLEDGER_SNAPSHOT environment variable
    3. Default: ~/.starledger/chain.jsonl
    """
    if snapshot_flag:
        return snapshot_flag.resolve()
    env_path = os.environ.get("STARLEDGER_SNAPSHOT")
    if env_path:
        return Path(env_path).resolve()
    return Path.home() / ".starledger" / "chain.jsonl"


def get_window() -> int:
    raw = os.environ.get("STARLEDGER_VALIDITY_WINDOW")
    if not raw:
        return VALIDITY_WINDOW_SECONDS
    try:
        return int(raw)
    except ValueError:
        console.print(f"[red]STARLEDGER_VALIDITY_WINDOW must be an integer, got {raw!r}[/]")
        raise typer.Exit(1)


def load_snapshot(snapshot: Optional[Path]):
    path = get_snapshot_path(snapshot)
    if not path.exists():
        console.print(f"[red]Snapshot file not found: {path}[/]")
        console.print("[yellow]To get started:[/]")
        console.print("  • Build one: starledger demo")
        console.print("  • Set env var: export STARLEDGER_SNAPSHOT=/path/to/chain.jsonl")
        console.print("  • Or use --snapshot: starledger blocks --snapshot /custom/chain.jsonl")
        raise typer.Exit(1)
    try:
        return path, load_jsonl(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Failed to read snapshot: {str(e)}[/]")
        raise typer.Exit(1)


@app.command()
def challenge(
    address: str = typer.Argument(..., help="Wallet address to issue the challenge for"),
):
    """Print the message an owner must sign to prove control of ADDRESS."""
    registry = StarRegistry()
    try:
        message = registry.request_challenge(address)
    except LedgerError as e:
        console.print(f"[red]{escape(str(e))}[/]")
        raise typer.Exit(1)
    console.print(message, markup=False, highlight=False, soft_wrap=True)


@app.command()
def keygen():
    """Generate a wallet key pair (address + base64url seed)."""
    wallet = WalletKeyPair.generate()
    console.print(f"address: {wallet.address()}", markup=False, highlight=False, soft_wrap=True)
    console.print(f"seed:    {wallet.seed_b64url()}", markup=False, highlight=False, soft_wrap=True)
    console.print("[yellow]Keep the seed private. It signs challenges for this address.[/]")


@app.command()
def sign(
    seed: str = typer.Argument(..., help="base64url wallet seed (from keygen)"),
    message: str = typer.Argument(..., help="Challenge message to sign"),
):
    """Sign a challenge message with a wallet seed."""
    try:
        wallet = WalletKeyPair.from_seed_b64url(seed)
    except ValueError as e:
        console.print(f"[red]Invalid seed: {e}[/]")
        raise typer.Exit(1)
    console.print(wallet.sign_message(message), markup=False, highlight=False, soft_wrap=True)


@app.command()
def demo(
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", "-s", help="Where to write the snapshot"),
    stars: int = typer.Option(3, "--stars", "-n", min=0, help="Number of stars to register"),
):
    """Build a ledger with signed star submissions and export it as a snapshot."""
    registry = StarRegistry(window=get_window())
    wallet = WalletKeyPair.generate()
    address = wallet.address()

    for i in range(stars):
        message = registry.request_challenge(address)
        star = {"dec": f"{i}° 0' 0.0", "ra": f"{i}h 0m 0.0s", "story": f"Demo star #{i}"}
        try:
            block = registry.submit_proof(address, message, wallet.sign_message(message), star)
        except LedgerError as e:
            console.print(f"[red]Submission {i} rejected: {e}[/]")
            raise typer.Exit(1)
        console.print(f"[green]✓[/] block #{block.height} {block.hash[:16]}")

    out_path = get_snapshot_path(snapshot)
    count = registry.export_chain(out_path)
    console.print(f"[green]Exported {count} blocks to {out_path}[/]")
    console.print(f"Owner address: {address}", markup=False, highlight=False, soft_wrap=True)


@app.command()
def blocks(
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", "-s"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of most recent blocks to show"),
):
    """Show the most recent blocks of a snapshot."""
    _, chain = load_snapshot(snapshot)
    if not chain:
        console.print("[yellow]Snapshot is empty.[/]")
        return

    table = Table(title="Blocks")
    table.add_column("Height")
    table.add_column("Time")
    table.add_column("Hash")
    table.add_column("Body")

    for block in chain[-limit:] if limit > 0 else chain:
        try:
            body = payload_json(block.decode_body())
        except ValueError:
            body = "<undecodable>"
        table.add_row(str(block.height), str(block.time), str(block.hash)[:16], escape(body[:80]))

    console.print(table)


@app.command()
def stars(
    address: str = typer.Argument(..., help="Owner wallet address"),
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", "-s"),
):
    """List the stars registered to ADDRESS, in ledger order."""
    _, chain = load_snapshot(snapshot)

    found = 0
    for block, star in owned_stars(chain, address):
        found += 1
        console.print(f"[bold cyan]#{block.height}[/] {escape(payload_json(star))}", soft_wrap=True)

    if not found:
        console.print(f"[yellow]No stars found for '{address}'[/]")


@app.command()
def verify(
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", "-s"),
):
    """Verify the integrity of a snapshot (block hashes + hash linkage)."""
    path, chain = load_snapshot(snapshot)
    result = ChainValidator().validate(chain)

    if result.is_valid:
        console.print(f"[green]✓ Snapshot '{path}' is valid[/]")
        console.print(f"  {result.message}")
    else:
        console.print(f"[red]✗ Verification failed for '{path}'[/]")
        for failure in result.failures:
            console.print(f"  • [{failure.index}] {failure.category}: {failure.message}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
