"""Storage slot changes taken from state-diff traces."""

from __future__ import annotations

from typing import Iterable, Optional

from .records import ColumnStore
from .state_diffs import DiffKind, StateDiffTrace

_ZERO_WORD = bytes(32)


def process_storage_diffs(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[StateDiffTrace],
    store: ColumnStore,
) -> None:
    """Store one row per changed storage slot, in address then slot order."""
    for index, (trace, tx_hash) in enumerate(zip(traces, transaction_hashes)):
        if trace.state_diff is None:
            continue
        tx_hash = None if tx_hash is None else bytes(tx_hash)
        for address in sorted(trace.state_diff, key=bytes):
            storage = trace.state_diff[address].storage
            for slot in sorted(storage, key=bytes):
                diff = storage[slot]
                if diff.kind is DiffKind.SAME:
                    continue
                if diff.kind is DiffKind.BORN:
                    old, new = _ZERO_WORD, diff.new
                elif diff.kind is DiffKind.DIED:
                    old, new = diff.old, _ZERO_WORD
                else:
                    old, new = diff.old, diff.new
                store.add_row()
                store.store("block_number", block_number)
                store.store("transaction_index", index)
                store.store("transaction_hash", tx_hash)
                store.store("slot", bytes(slot))
                store.store("address", bytes(address))
                store.store("from_value", bytes(old))
                store.store("to_value", bytes(new))