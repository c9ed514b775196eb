# starledger/core/types.py
import json
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple

from starledger.core.errors import InvalidPayload
from starledger.core.encoding import b64url_encode, b64url_decode
from starledger.crypto.hashing import block_hash

GENESIS_DATA = {"data": "Genesis Block"}


def payload_json(payload: Any) -> str:
    """
    Compact, key-sorted JSON for a payload. Raises InvalidPayload unless the
    payload reads back exactly as given: string keys only, no NaN or
    infinity, no sets or tuples. Integers keep full precision.
    """
    try:
        text = json.dumps(payload, sort_keys=True, separators=(",", ":"),
                          ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidPayload(f"Payload is not JSON: {e}") from e
    if json.loads(text) != payload:
        raise InvalidPayload("Payload does not survive a JSON round trip (non-string keys or tuples?)")
    return text


def encode_body(payload: Dict[str, Any]) -> str:
    """Payload dict → base64url of its sorted compact JSON."""
    if not isinstance(payload, dict):
        raise InvalidPayload(f"Body payload must be an object, got {type(payload).__name__}")
    return b64url_encode(payload_json(payload).encode("utf-8"))


def decode_body(body: str) -> Dict[str, Any]:
    """Inverse of encode_body. Raises ValueError if the body is not an encoded JSON object."""
    try:
        payload = json.loads(b64url_decode(body).decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ValueError(f"Body is not UTF-8: {e}") from e
    if not isinstance(payload, dict):
        raise ValueError(f"Body decodes to {type(payload).__name__}, expected object")
    return payload


@dataclass(frozen=True)
class Block:
    """Single hash-linked record in the ledger."""
    body: str                                   # base64url(canonical JSON payload)
    height: int = -1                            # -1 until sealed
    time: int = 0                               # unix seconds, set at append
    previous_block_hash: Optional[str] = None   # None only for genesis
    hash: str = ""                              # sha256 hex, set exactly once

    @classmethod
    def genesis(cls) -> "Block":
        return cls(body=encode_body(GENESIS_DATA))

    @classmethod
    def for_star(cls, owner: str, star: Any) -> "Block":
        return cls(body=encode_body({"owner": owner, "star": star}))

    @property
    def is_genesis(self) -> bool:
        return self.height == 0

    @property
    def is_sealed(self) -> bool:
        return self.hash != ""

    def to_dict(self) -> dict:
        return asdict(self)

    def content(self) -> dict:
        """Every field except the hash: the input to compute_hash."""
        d = self.to_dict()
        del d["hash"]
        return d

    def compute_hash(self) -> str:
        return block_hash(self)

    def validate(self) -> bool:
        """Self-validation: recomputed content hash equals the stored one."""
        try:
            return self.is_sealed and self.compute_hash() == self.hash
        except (TypeError, ValueError):
            # fields tampered into something that no longer canonicalizes
            return False

    def decode_body(self) -> Dict[str, Any]:
        return decode_body(self.body)

    def star_record(self) -> Optional[Tuple[str, Any]]:
        """(owner, star) for star bodies, None for genesis or anything unrecognized."""
        if self.is_genesis:
            return None
        try:
            payload = self.decode_body()
        except ValueError:
            return None
        if set(payload) != {"owner", "star"} or not isinstance(payload["owner"], str):
            return None
        return payload["owner"], payload["star"]

