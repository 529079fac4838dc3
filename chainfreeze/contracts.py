"""Contract creations extracted from traces."""

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
    keccak256,
)


def _root_sender(trace: Trace) -> bytes:
    action = trace.action
    if isinstance(action, (CallAction, CreateAction)):
        return action.from_address
    if isinstance(action, SuicideAction):
        return action.refund_address
    if isinstance(action, RewardAction):
        return action.author
    raise TypeError(f"unknown trace action: {action!r}")


def process_contracts(traces: Iterable[Trace], store: ColumnStore) -> None:
    """Store one row for every successful contract creation."""
    deployer = bytes(20)
    create_index = 0
    for trace in traces:
        if not trace.trace_address:
            deployer = bytes(_root_sender(trace))

        action, result = trace.action, trace.result
        if not (isinstance(action, CreateAction) and isinstance(result, CreateResult)):
            continue

        store.add_row()
        store.store("block_number", trace.block_number)
        store.store("block_hash", bytes(trace.block_hash))
        store.store("create_index", create_index)
        create_index += 1
        store.store(
            "transaction_hash",
            None if trace.transaction_hash is None else bytes(trace.transaction_hash),
        )
        store.store("contract_address", bytes(result.address))
        store.store("deployer", deployer)
        store.store("factory", bytes(action.from_address))
        store.store("init_code", bytes(action.init))
        store.store("code", bytes(result.code))
        store.store("init_code_hash", keccak256(result.code))
        store.store("code_hash", keccak256(action.init))
        store.store("n_init_code_bytes", len(action.init))
        store.store("n_code_bytes", len(result.code))