# starledger/__init__.py
"""
starledger — an in-process, append-only ledger of hash-linked blocks.
Owners prove control of a wallet address through a timed challenge/response
handshake before a star record is attached to the chain under their name.
"""

__version__ = "0.1.0-dev"
