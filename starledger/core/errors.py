# starledger/core/errors.py
"""
Error taxonomy for the ledger and the ownership handshake.

Each error also subclasses the builtin family callers would expect for the
same situation, so ``except ValueError`` around address parsing keeps working.
"""


class LedgerError(Exception):
    """Base for every error raised by starledger."""


class InvalidAddress(LedgerError, ValueError):
    """Challenge requested for an empty or non-string address."""


class MalformedMessage(LedgerError, ValueError):
    """Challenge message is not ``<address>:<unix seconds>:starRegistry``."""


class VerificationExpired(LedgerError, PermissionError):
    """Proof submitted after the ownership verification window closed."""

    def __init__(self, elapsed: int, window: int):
        self.elapsed = elapsed
        self.window = window
        super().__init__(f"too late: {elapsed}s elapsed, window is {window}s")


class InvalidSignature(LedgerError, PermissionError):
    """Signature does not prove ownership of the address."""


class ChainCorruption(LedgerError, RuntimeError):
    """Pre-write validation found the chain tampered with; nothing was appended."""

    def __init__(self, result):
        self.result = result
        super().__init__(f"Chain corruption detected\n{result}")


class GenesisError(LedgerError, RuntimeError):
    """The genesis block could not be sealed; the ledger is unusable."""


class InvalidPayload(LedgerError, ValueError):
    """Star payload cannot be stored as JSON without changing it."""


class ChallengeNotYetValid(LedgerError, PermissionError):
    """Challenge carries a timestamp later than the ledger's clock."""
