# starledger/storage/jsonl.py
import json
from pathlib import Path
from typing import Iterable, List

from starledger.core.types import Block

_FIELDS = ("height", "time", "body", "previous_block_hash", "hash")


def block_from_dict(d: dict) -> Block:
    """Rebuild a block exactly as stored. Nothing is recomputed, so tampering stays visible."""
    if not isinstance(d, dict):
        raise ValueError(f"Expected a JSON object, got {type(d).__name__}")
    missing = [k for k in _FIELDS if k not in d]
    if missing:
        raise ValueError(f"Missing block fields: {', '.join(missing)}")
    return Block(**{k: d[k] for k in _FIELDS})


def export_jsonl(chain: Iterable[Block], path: str | Path) -> int:
    """Write one block per line (compact JSON). Returns the number of blocks written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for block in chain:
            json.dump(block.to_dict(), f, separators=(",", ":"))
            f.write("\n")
            count += 1
    return count


def load_jsonl(path: str | Path) -> List[Block]:
    """Read a snapshot written by export_jsonl. Raises ValueError naming the bad line."""
    blocks = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                blocks.append(block_from_dict(json.loads(line)))
            except ValueError as e:
                raise ValueError(f"{path}:{lineno}: {e}") from e
    return blocks
