"""Parity-style traces: filtering and flattening into columns."""

from __future__ import annotations

from typing import Iterable, Optional

from .records import (
    ActionType,
    CallAction,
    CallResult,
    CallType,
    ColumnStore,
    CreateAction,
    CreateResult,
    RewardAction,
    RewardType,
    SuicideAction,
    Trace,
)

_REWARD_NAMES = {
    RewardType.BLOCK: "reward",
    RewardType.UNCLE: "uncle",
    RewardType.EMPTY_STEP: "empty_step",
    RewardType.EXTERNAL: "external",
}

_ACTION_NAMES = {
    ActionType.CALL: "call",
    ActionType.CREATE: "create",
    ActionType.REWARD: "reward",
    ActionType.SUICIDE: "suicide",
}

_CALL_TYPE_NAMES = {
    CallType.NONE: "none",
    CallType.CALL: "call",
    CallType.CALL_CODE: "call_code",
    CallType.DELEGATE_CALL: "delegate_call",
    CallType.STATIC_CALL: "static_call",
}


def reward_type_to_string(reward_type: RewardType) -> str:
    return _REWARD_NAMES[reward_type]


def action_type_to_string(action_type: ActionType) -> str:
    return _ACTION_NAMES[action_type]


def action_call_type_to_string(call_type: CallType) -> str:
    return _CALL_TYPE_NAMES[call_type]


def filter_failed_traces(traces: Iterable[Trace]) -> list[Trace]:
    """Drop failed traces together with every trace nested beneath them."""
    error_address: Optional[tuple[int, ...]] = None
    filtered = []
    for trace in traces:
        if not trace.trace_address:
            error_address = None
        if error_address is not None:
            if trace.trace_address[: len(error_address)] == error_address and len(
                trace.trace_address
            ) >= len(error_address):
                continue
            error_address = None
        if trace.error is not None:
            error_address = tuple(trace.trace_address)
        else:
            filtered.append(trace)
    return filtered


def _trace_from(trace: Trace) -> Optional[bytes]:
    action = trace.action
    if isinstance(action, (CallAction, CreateAction)):
        return action.from_address
    if isinstance(action, SuicideAction):
        return action.address
    return None


def _trace_to(trace: Trace) -> Optional[bytes]:
    action = trace.action
    if isinstance(action, CallAction):
        return action.to_address
    if isinstance(action, SuicideAction):
        return action.refund_address
    if isinstance(action, RewardAction):
        return action.author
    return None


def filter_traces_by_from_to_addresses(
    traces: Iterable[Trace],
    from_address: Optional[bytes],
    to_address: Optional[bytes],
) -> list[Trace]:
    """Keep traces whose sender and recipient match the given addresses."""

    def keep(trace: Trace) -> bool:
        if from_address is not None:
            sender = _trace_from(trace)
            if sender is None or bytes(sender) != bytes(from_address):
                return False
        if to_address is not None:
            recipient = _trace_to(trace)
            if recipient is None or bytes(recipient) != bytes(to_address):
                return False
        return True

    return [trace for trace in traces if keep(trace)]


def store_action(action, store: ColumnStore) -> None:
    """Store the action columns shared by trace datasets."""
    if isinstance(action, CallAction):
        values = (
            bytes(action.from_address),
            bytes(action.to_address),
            str(action.value),
            action.gas,
            bytes(action.input),
            action_call_type_to_string(action.call_type),
            None,
            None,
        )
    elif isinstance(action, CreateAction):
        values = (
            bytes(action.from_address),
            None,
            str(action.value),
            action.gas,
            None,
            None,
            bytes(action.init),
            None,
        )
    elif isinstance(action, SuicideAction):
        values = (
            bytes(action.address),
            bytes(action.refund_address),
            str(action.balance),
            None,
            None,
            None,
            None,
            None,
        )
    else:
        values = (
            bytes(action.author),
            None,
            str(action.value),
            None,
            None,
            None,
            None,
            reward_type_to_string(action.reward_type),
        )
    names = (
        "action_from",
        "action_to",
        "action_value",
        "action_gas",
        "action_input",
        "action_call_type",
        "action_init",
        "action_reward_type",
    )
    for name, value in zip(names, values):
        store.store(name, value)


def store_result(result, store: ColumnStore) -> None:
    """Store the result columns shared by trace datasets."""
    if isinstance(result, CallResult):
        values = (result.gas_used, bytes(result.output), None, None)
    elif isinstance(result, CreateResult):
        values = (result.gas_used, None, bytes(result.code), bytes(result.address))
    else:
        values = (None, None, None, None)
    names = ("result_gas_used", "result_output", "result_code", "result_address")
    for name, value in zip(names, values):
        store.store(name, value)


def process_traces(traces: Iterable[Trace], store: ColumnStore) -> None:
    """Flatten traces into the traces dataset columns."""
    for trace in traces:
        store.add_row()
        store_action(trace.action, store)
        store_result(trace.result, store)
        store.store("action_type", action_type_to_string(trace.action_type))
        store.store("trace_address", "_".join(str(n) for n in trace.trace_address))
        store.store("subtraces", trace.subtraces)
        store.store("transaction_index", trace.transaction_position)
        store.store(
            "transaction_hash",
            None if trace.transaction_hash is None else bytes(trace.transaction_hash),
        )
        store.store("block_number", trace.block_number)
        store.store("block_hash", bytes(trace.block_hash))
        store.store("error", trace.error)