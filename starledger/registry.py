# starledger/registry.py
from pathlib import Path
from typing import Any, Callable, List, Optional

from starledger.chain.blockchain import Blockchain
from starledger.core.types import Block
from starledger.crypto.keys import verify_signature
from starledger.ownership.verification import (
    OwnershipVerifier,
    SignatureVerifier,
    VALIDITY_WINDOW_SECONDS,
)
from starledger.storage import export_jsonl
from starledger.verify.validator import VerificationResult


class StarRegistry:
    """The operations a surrounding service, API or CLI talks to."""

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        signature_verifier: SignatureVerifier = verify_signature,
        window: int = VALIDITY_WINDOW_SECONDS,
    ):
        self.blockchain = Blockchain(clock=clock)
        self.ownership = OwnershipVerifier(
            self.blockchain,
            signature_verifier=signature_verifier,
            clock=clock,
            window=window,
        )

    def get_chain_height(self) -> int:
        return self.blockchain.get_height()

    def request_challenge(self, address: str) -> str:
        return self.ownership.request_challenge(address)

    def submit_proof(self, address: str, message: str, signature: str, star: Any) -> Block:
        return self.ownership.submit_proof(address, message, signature, star)

    def get_block_by_hash(self, hash: str) -> Optional[Block]:
        return self.blockchain.get_block_by_hash(hash)

    def get_block_by_height(self, height: int) -> Optional[Block]:
        return self.blockchain.get_block_by_height(height)

    def get_stars_by_owner(self, address: str) -> List[Any]:
        return self.blockchain.get_stars_by_owner(address)

    def validate_chain(self) -> VerificationResult:
        return self.blockchain.validate_chain()

    def export_chain(self, path: str | Path) -> int:
        return export_jsonl(self.blockchain.get_chain(), path)
