"""Debug-trace datasets: call frames, opcode logs, 4-byte counts and JavaScript tracer output."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from .records import ColumnStore

_U64_MAX = 2**64 - 1
_HEX_BYTE = re.compile(r"[0-9a-fA-F]{2}")
_DECIMAL = re.compile(r"\+?[0-9]+")


@dataclass
class CallFrame:
    """One frame of a call tracer result, with the frames of the calls it made."""

    typ: str
    from_address: bytes
    to_address: Optional[Union[bytes, str]] = None
    value: Optional[int] = None
    gas: int = 0
    gas_used: int = 0
    input: bytes = b""
    output: Optional[bytes] = None
    error: Optional[str] = None
    calls: Optional[list[CallFrame]] = None


@dataclass
class StructLog:
    """One executed opcode as reported by the default struct logger."""

    depth: int
    gas: int
    gas_cost: int
    op: str
    pc: int
    error: Optional[str] = None
    refund_counter: Optional[int] = None
    memory: Optional[list[str]] = None
    stack: Optional[list[Any]] = None
    storage: Optional[dict[str, str]] = None


@dataclass
class DefaultFrame:
    """The struct logs of one transaction and the data it returned."""

    struct_logs: list[StructLog] = field(default_factory=list)
    return_value: bytes = b""


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def _address_bytes(value: Optional[Union[bytes, str]]) -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, str):
        raise ValueError("block name string not allowed")
    return bytes(value)


def _hash(tx_hash: Optional[bytes]) -> Optional[bytes]:
    return None if tx_hash is None else bytes(tx_hash)


def process_geth_calls(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    frames: Iterable[CallFrame],
    store: ColumnStore,
) -> None:
    """Store one row per call frame, depth first, with its space-separated trace address."""
    for tx_index, (tx_hash, frame) in enumerate(zip(transaction_hashes, frames)):
        tx_hash = _hash(tx_hash)
        pending: list[tuple[CallFrame, tuple[int, ...]]] = [(frame, ())]
        while pending:
            current, trace_address = pending.pop()
            to_address = _address_bytes(current.to_address)
            store.add_row()
            store.store("typ", current.typ)
            store.store("from_address", bytes(current.from_address))
            store.store("to_address", to_address)
            store.store("value", current.value)
            store.store("gas", current.gas)
            store.store("gas_used", current.gas_used)
            store.store("input", bytes(current.input))
            store.store("output", None if current.output is None else bytes(current.output))
            store.store("error", current.error)
            store.store("block_number", block_number)
            store.store("transaction_hash", tx_hash)
            store.store("transaction_index", tx_index)
            store.store("trace_address", " ".join(str(n) for n in trace_address))
            if current.calls:
                children = [
                    (child, trace_address + (position,))
                    for position, child in enumerate(current.calls)
                ]
                pending.extend(reversed(children))


def process_geth_opcodes(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    frames: Iterable[DefaultFrame],
    store: ColumnStore,
) -> None:
    """Store one row per struct log; the last row of a frame carries its return data."""
    table = store.table
    for tx_index, (tx_hash, frame) in enumerate(zip(transaction_hashes, frames)):
        tx_hash = _hash(tx_hash)
        last = len(frame.struct_logs) - 1
        for position, struct_log in enumerate(frame.struct_logs):
            store.add_row()
            store.store("block_number", block_number)
            store.store("transaction_hash", tx_hash)
            store.store("transaction_index", tx_index)
            store.store("trace_address", "")
            store.store("depth", struct_log.depth)
            store.store("error", struct_log.error)
            store.store("gas", struct_log.gas)
            store.store("gas_cost", struct_log.gas_cost)
            store.store("pc", struct_log.pc)
            store.store("op", struct_log.op)
            store.store("refund_counter", struct_log.refund_counter)
            for name in ("memory", "stack", "storage"):
                if table.has_column(name):
                    store.store(name, _to_json(getattr(struct_log, name)))
            store.store(
                "return_data", bytes(frame.return_value) if position == last else None
            )


def _strip_prefixes(text: str, prefix: str) -> str:
    while text.startswith(prefix):
        text = text[len(prefix):]
    return text


def parse_signature_size(signature_size: str) -> tuple[bytes, int]:
    """Split a "<selector>-<call data size>" key into the selector bytes and the size."""
    parts = signature_size.split("-", 1)
    if len(parts) != 2:
        raise ValueError("could not parse 4byte-size pair")
    hex_part = _strip_prefixes(parts[0], "0x")
    pairs = [hex_part[i:i + 2] for i in range(0, len(hex_part), 2)]
    if not all(_HEX_BYTE.fullmatch(pair) for pair in pairs):
        raise ValueError("could not parse signature bytes")
    signature = bytes(int(pair, 16) for pair in pairs)
    if not _DECIMAL.fullmatch(parts[1]) or int(parts[1]) > _U64_MAX:
        raise ValueError("could not parse call data size")
    return signature, int(parts[1])


def process_four_byte_counts(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[Mapping[str, int]],
    store: ColumnStore,
) -> None:
    """Store one row per selector and call data size counted in each transaction."""
    for index, (trace, tx_hash) in enumerate(zip(traces, transaction_hashes)):
        tx_hash = _hash(tx_hash)
        for key in sorted(trace):
            signature, size = parse_signature_size(key)
            store.add_row()
            store.store("block_number", block_number)
            store.store("transaction_index", index)
            store.store("transaction_hash", tx_hash)
            store.store("signature", signature)
            store.store("size", size)
            store.store("count", trace[key])


def process_javascript_traces(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    values: Iterable[Any],
    store: ColumnStore,
) -> None:
    """Store one row per transaction holding the tracer's JSON output."""
    for index, (value, tx_hash) in enumerate(zip(values, transaction_hashes)):
        store.add_row()
        store.store("block_number", block_number)
        store.store("transaction_index", index)
        store.store("transaction_hash", _hash(tx_hash))
        store.store("output", _to_json(value))