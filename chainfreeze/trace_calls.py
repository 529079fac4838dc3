"""Traces produced by simulating a call against a contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .records import Action, ColumnStore, TraceResult, _ACTION_TYPES, ActionType
from .traces import action_type_to_string, store_action, store_result


@dataclass
class TransactionTrace:
    """One trace entry returned for a simulated call."""

    action: Action
    result: TraceResult = None
    trace_address: tuple[int, ...] = ()
    subtraces: int = 0
    error: Optional[str] = None

    def __post_init__(self) -> None:
        self.trace_address = tuple(self.trace_address)

    @property
    def action_type(self) -> ActionType:
        return _ACTION_TYPES[type(self.action)]


def process_trace_calls(
    block_number: int,
    contract: bytes,
    call_data: bytes,
    traces: Iterable[TransactionTrace],
    store: ColumnStore,
) -> None:
    """Flatten the traces of one simulated call into the trace_calls columns."""
    contract = bytes(contract)
    call_data = bytes(call_data)
    for transaction_index, trace in enumerate(traces):
        store.add_row()
        store_action(trace.action, store)
        store_result(trace.result, store)
        store.store("action_type", action_type_to_string(trace.action_type))
        store.store("trace_address", "_".join(str(n) for n in trace.trace_address))
        store.store("subtraces", trace.subtraces)
        store.store("transaction_index", transaction_index)
        store.store("block_number", block_number)
        store.store("error", trace.error)
        store.store("tx_to_address", contract)
        store.store("tx_call_data", call_data)