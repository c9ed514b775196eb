# starledger/storage/__init__.py
"""
Snapshot export for offline audit.

A live ledger is never rehydrated from disk; snapshots exist so a chain can
be inspected and verified after the fact (see ``starledger verify``).
"""

from .jsonl import export_jsonl, load_jsonl, block_from_dict

__all__ = ["export_jsonl", "load_jsonl", "block_from_dict"]
