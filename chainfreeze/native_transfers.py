"""Native value transfers extracted from traces."""

from __future__ import annotations

from typing import Iterable

from .records import (
    CallAction,
    ColumnStore,
    CreateAction,
    CreateResult,
    RewardAction,
    SuicideAction,
    Trace,
)


def process_native_transfers(traces: Iterable[Trace], store: ColumnStore) -> None:
    """Store one row per trace describing the value it moves."""
    for transfer_index, trace in enumerate(traces):
        store.add_row()
        store.store("block_number", trace.block_number)
        store.store("transaction_index", trace.transaction_position)
        store.store("block_hash", bytes(trace.block_hash))
        store.store("transfer_index", transfer_index)
        store.store(
            "transaction_hash",
            None if trace.transaction_hash is None else bytes(trace.transaction_hash),
        )

        action = trace.action
        if isinstance(action, CallAction):
            sender, recipient, value = action.from_address, action.to_address, action.value
        elif isinstance(action, CreateAction):
            sender = action.from_address
            if isinstance(trace.result, CreateResult):
                recipient = trace.result.address
            else:
                recipient = bytes(32)
            value = action.value
        elif isinstance(action, SuicideAction):
            sender, recipient, value = action.address, action.refund_address, action.balance
        elif isinstance(action, RewardAction):
            sender, recipient, value = bytes(20), action.author, action.value
        else:
            raise TypeError(f"unknown trace action: {action!r}")

        store.store("from_address", bytes(sender))
        store.store("to_address", bytes(recipient))
        store.store("value", value)