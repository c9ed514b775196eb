# starledger/verify/validator.py
import logging
from typing import List, Optional, Sequence
from dataclasses import dataclass

from starledger.core.types import Block

logger = logging.getLogger(__name__)


@dataclass
class VerificationFailure:
    index: int
    message: str
    category: str = "general"  # e.g. "hash", "hash_chain", "height", "genesis"


@dataclass
class VerificationResult:
    is_valid: bool
    message: str = ""
    failures: List[VerificationFailure] = None

    def __post_init__(self):
        if self.failures is None:
            self.failures = []

    @property
    def first_failure(self) -> Optional[VerificationFailure]:
        return self.failures[0] if self.failures else None

    def fail(self, index: int, message: str, category: str) -> None:
        self.failures.append(VerificationFailure(index, message, category))
        self.is_valid = False

    def __bool__(self):
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return "Chain is valid ✓"
        lines = [f"Verification FAILED ({len(self.failures)} issues):"]
        for f in self.failures:
            lines.append(f"  • [{f.index}] {f.category}: {f.message}")
        return "\n".join(lines)


class ChainValidator:
    """
    Walks a chain snapshot and checks every block's self-hash and its link
    to the previous block. Failures are collected, never raised: a broken
    chain is an expected outcome of an audit.
    """

    def validate(self, chain: Sequence[Block]) -> VerificationResult:
        if not chain:
            return VerificationResult(True, "Empty chain is valid")

        result = VerificationResult(True)

        for i, block in enumerate(chain):
            # 1. Position
            if block.height != i:
                result.fail(i, f"Height mismatch: expected {i}, got {block.height}", "height")

            # 2. Self-hash
            if not block.validate():
                result.fail(i, "Stored hash does not match recomputed content hash", "hash")

            # 3. Linkage
            if i == 0:
                if block.previous_block_hash is not None:
                    result.fail(i, "Genesis block must not carry a previous hash", "genesis")
            elif block.previous_block_hash != chain[i - 1].hash:
                result.fail(i, "previous_block_hash does not match previous block hash", "hash_chain")

        if result.is_valid:
            result.message = f"Valid chain ({len(chain)} blocks)"
        else:
            result.message = f"Failed with {len(result.failures)} issues"
            logger.warning("Chain validation failed: %s", result.message)
        return result
