"""Block headers flattened into columns."""

from __future__ import annotations

from typing import Optional

from .records import Block, ColumnStore


def _optional_bytes(value: Optional[bytes]) -> Optional[bytes]:
    return None if value is None else bytes(value)


def process_block(block: Block, store: ColumnStore) -> None:
    """Store one row describing a block header."""
    store.add_row()
    store.store("block_hash", _optional_bytes(block.hash))
    store.store("parent_hash", bytes(block.parent_hash))
    store.store("uncles_hash", bytes(block.uncles_hash))
    store.store("author", _optional_bytes(block.author))
    store.store("state_root", bytes(block.state_root))
    store.store("transactions_root", bytes(block.transactions_root))
    store.store("receipts_root", bytes(block.receipts_root))
    store.store("block_number", block.number)
    store.store("gas_used", block.gas_used)
    store.store("gas_limit", block.gas_limit)
    store.store("extra_data", bytes(block.extra_data))
    store.store("logs_bloom", _optional_bytes(block.logs_bloom))
    store.store("timestamp", block.timestamp)
    store.store("difficulty", block.difficulty)
    store.store("total_difficulty", block.total_difficulty)
    store.store("base_fee_per_gas", block.base_fee_per_gas)
    store.store("size", block.size)
    store.store("mix_hash", _optional_bytes(block.mix_hash))
    store.store("nonce", _optional_bytes(block.nonce))
    store.store("withdrawals_root", _optional_bytes(block.withdrawals_root))