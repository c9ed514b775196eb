# starledger/crypto/keys.py
"""
Wallet keys for the ownership handshake.

A wallet address is the base64url-encoded 32-byte Ed25519 verify key; a
signature is the base64url-encoded 64-byte detached signature over the UTF-8
challenge message.
"""
from dataclasses import dataclass
from typing import Optional

import nacl.exceptions
import nacl.signing

from starledger.core.encoding import b64url_encode, b64url_decode


@dataclass(frozen=True)
class WalletKeyPair:
    verify_key: nacl.signing.VerifyKey
    signing_key: Optional[nacl.signing.SigningKey] = None

    @classmethod
    def generate(cls) -> "WalletKeyPair":
        sk = nacl.signing.SigningKey.generate()
        return cls(verify_key=sk.verify_key, signing_key=sk)

    @classmethod
    def from_seed_b64url(cls, seed: str) -> "WalletKeyPair":
        raw = b64url_decode(seed)
        if len(raw) != 32:
            raise ValueError(f"Seed must be 32 bytes, got {len(raw)}")
        sk = nacl.signing.SigningKey(raw)
        return cls(verify_key=sk.verify_key, signing_key=sk)

    @classmethod
    def from_address(cls, address: str) -> "WalletKeyPair":
        """Verify-only key pair. Raises ValueError if the address is not a key."""
        raw = b64url_decode(address)
        if len(raw) != 32:
            raise ValueError(f"Address must encode 32 bytes, got {len(raw)}")
        return cls(verify_key=nacl.signing.VerifyKey(raw))

    def address(self) -> str:
        return b64url_encode(bytes(self.verify_key))

    def seed_b64url(self) -> str:
        if self.signing_key is None:
            raise ValueError("Verify-only key pair has no seed")
        return b64url_encode(bytes(self.signing_key))

    def sign_message(self, message: str) -> str:
        if self.signing_key is None:
            raise ValueError("Cannot sign with a verify-only key pair")
        signed = self.signing_key.sign(message.encode("utf-8"))
        return b64url_encode(signed.signature)

    def verify_message(self, message: str, signature: str) -> bool:
        try:
            sig = b64url_decode(signature)
            self.verify_key.verify(message.encode("utf-8"), sig)
            return True
        except (ValueError, nacl.exceptions.BadSignatureError):
            return False


def verify_signature(message: str, address: str, signature: str) -> bool:
    """True iff ``signature`` is the address owner's signature over ``message``."""
    if not all(isinstance(x, str) for x in (message, address, signature)):
        return False
    try:
        wallet = WalletKeyPair.from_address(address)
    except ValueError:
        return False
    return wallet.verify_message(message, signature)
