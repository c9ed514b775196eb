# starledger/crypto/hashing.py
import hashlib

from starledger.core.canon import canonical_json


def sha256_hex(data: bytes) -> str:
    """The ledger's hash function: SHA-256, hex encoded."""
    return hashlib.sha256(data).hexdigest()


def block_hash(block) -> str:
    """Hash of a block's content (every field but ``hash``), as sealed by the ledger."""
    return sha256_hex(canonical_json(block.content()))
