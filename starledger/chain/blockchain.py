# starledger/chain/blockchain.py
import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from starledger.core.errors import ChainCorruption, GenesisError
from starledger.core.types import Block
from starledger.crypto.hashing import block_hash
from starledger.verify.validator import ChainValidator, VerificationResult

logger = logging.getLogger(__name__)


def unix_now() -> int:
    return int(time.time())


def owned_stars(chain: Sequence[Block], address: str) -> Iterator[Tuple[Block, Any]]:
    """(block, star) pairs owned by ``address``, in ledger order. Genesis is never a star."""
    for block in chain[1:]:
        record = block.star_record()
        if record is not None and record[0] == address:
            yield block, record[1]


class Blockchain:
    """
    Append-only sequence of hash-linked blocks, seeded with a genesis block.

    All appends go through one lock: validate → seal → push is a single
    critical section. Readers work on a tuple snapshot of the list and never
    take the lock; a block is only pushed once it is fully sealed, and the
    height is derived from the list, so readers always see a consistent chain.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        validator: Optional[ChainValidator] = None,
    ):
        self._clock = clock or unix_now
        self._validator = validator or ChainValidator()
        self._chain: List[Block] = []
        self._write_lock = threading.Lock()

        try:
            genesis = self.append(Block.genesis())
        except Exception as e:
            raise GenesisError(f"Could not seal genesis block: {e}") from e
        logger.info("Ledger initialized with genesis block %s", genesis.hash[:16])

    @property
    def height(self) -> int:
        return len(self._chain) - 1

    def get_height(self) -> int:
        return self.height

    def append(self, block: Block) -> Block:
        """
        Validate the whole chain, then seal ``block`` on top of it:
        height → time → previous_block_hash → hash → push.
        Raises ChainCorruption (and leaves the chain untouched) if validation fails.
        """
        with self._write_lock:
            result = self._validator.validate(tuple(self._chain))
            if not result:
                raise ChainCorruption(result)

            prev_hash = self._chain[-1].hash if self._chain else None
            unsealed = replace(
                block,
                height=len(self._chain),
                time=int(self._clock()),
                previous_block_hash=prev_hash,
                hash="",
            )
            sealed = replace(unsealed, hash=block_hash(unsealed))
            self._chain.append(sealed)

        logger.info("Appended block #%d %s", sealed.height, sealed.hash[:16])
        return sealed

    def get_chain(self) -> Tuple[Block, ...]:
        """Snapshot of the full chain (immutable view)."""
        return tuple(self._chain)

    def get_last_hash(self) -> Optional[str]:
        chain = self.get_chain()
        return chain[-1].hash if chain else None

    def get_block_by_hash(self, hash: str) -> Optional[Block]:
        for block in self.get_chain():
            if block.hash == hash:
                return block
        return None

    def get_block_by_height(self, height: int) -> Optional[Block]:
        if isinstance(height, bool) or not isinstance(height, int):
            return None
        for block in self.get_chain():
            if block.height == height:
                return block
        return None

    def get_stars_by_owner(self, address: str) -> List[Any]:
        """Star payloads owned by ``address``, in ledger order."""
        return [star for _, star in owned_stars(self.get_chain(), address)]

    def validate_chain(self) -> VerificationResult:
        """Standalone audit; reports failures instead of raising."""
        return self._validator.validate(self.get_chain())
