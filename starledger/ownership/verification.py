# starledger/ownership/verification.py
"""
Challenge/response handshake that gates star submissions.

1. ``request_challenge(address)`` → ``"<address>:<unix seconds>:starRegistry"``
2. The owner signs that exact message with their wallet, off-ledger.
3. ``submit_proof(address, message, signature, star)`` checks freshness and
   the signature, then appends a ``{owner, star}`` block.

No server-side state ties a challenge to an address; the message itself
carries everything, so concurrent challenges for one address are all valid
within their own window.
"""
import logging
from typing import Any, Callable, Optional, Tuple

from starledger.chain.blockchain import Blockchain, unix_now
from starledger.core.errors import (
    ChallengeNotYetValid,
    InvalidAddress,
    InvalidSignature,
    MalformedMessage,
    VerificationExpired,
)
from starledger.core.types import Block
from starledger.crypto.keys import verify_signature

logger = logging.getLogger(__name__)

VALIDITY_WINDOW_SECONDS = 300
CHALLENGE_SUFFIX = "starRegistry"

SignatureVerifier = Callable[[str, str, str], bool]


def parse_challenge(message: str) -> Tuple[str, int]:
    """Split a challenge message into (address, timestamp). Raises MalformedMessage."""
    if not isinstance(message, str):
        raise MalformedMessage(f"Challenge message must be a string, got {type(message).__name__}")
    parts = message.split(":")
    if len(parts) != 3 or parts[2] != CHALLENGE_SUFFIX or not parts[0]:
        raise MalformedMessage(f"Expected '<address>:<timestamp>:{CHALLENGE_SUFFIX}', got {message!r}")
    address, ts = parts[0], parts[1]
    if not ts.isdigit() or not ts.isascii():
        raise MalformedMessage(f"Challenge timestamp is not a unix second count: {ts!r}")
    return address, int(ts)


class OwnershipVerifier:
    """Issues challenges and turns verified proofs into appended star blocks."""

    def __init__(
        self,
        blockchain: Blockchain,
        signature_verifier: SignatureVerifier = verify_signature,
        clock: Optional[Callable[[], int]] = None,
        window: int = VALIDITY_WINDOW_SECONDS,
    ):
        if window <= 0:
            raise ValueError(f"Validity window must be positive, got {window}")
        self.blockchain = blockchain
        self.signature_verifier = signature_verifier
        self.window = window
        self._clock = clock or unix_now

    def request_challenge(self, address: str) -> str:
        if not isinstance(address, str) or not address.strip():
            raise InvalidAddress("Not a valid address")
        if ":" in address:
            # would make the message unparseable on the way back
            raise InvalidAddress(f"Address must not contain ':': {address!r}")
        return f"{address}:{int(self._clock())}:{CHALLENGE_SUFFIX}"

    def submit_proof(self, address: str, message: str, signature: str, star: Any) -> Block:
        """
        Verify a signed challenge and append ``{owner: address, star: star}``.
        Raises MalformedMessage, ChallengeNotYetValid, VerificationExpired,
        InvalidSignature, InvalidPayload or ChainCorruption; nothing is
        appended unless every check passes.
        """
        message_address, issued_at = parse_challenge(message)

        elapsed = int(self._clock()) - issued_at
        if elapsed < 0:
            logger.warning("Rejected proof for %s: challenge dated %ds ahead", address, -elapsed)
            raise ChallengeNotYetValid(f"Challenge timestamp {issued_at} lies in the future")
        if elapsed >= self.window:
            logger.warning("Rejected proof for %s: challenge is %ds old", address, elapsed)
            raise VerificationExpired(elapsed, self.window)

        if message_address != address:
            logger.warning("Rejected proof for %s: challenge was issued to %s", address, message_address)
            raise InvalidSignature(f"Challenge was issued to {message_address!r}, not {address!r}")

        # InvalidPayload surfaces before any signature work
        block = Block.for_star(address, star)

        try:
            verified = self.signature_verifier(message, address, signature)
        except ValueError as e:
            raise InvalidSignature(f"Signature could not be checked: {e}") from e
        if not verified:
            logger.warning("Rejected proof for %s: bad signature", address)
            raise InvalidSignature(f"Signature does not match address {address!r}")

        return self.blockchain.append(block)
