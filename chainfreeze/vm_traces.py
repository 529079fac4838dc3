"""Opcode-level virtual machine traces flattened into columns."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from .records import ColumnStore


@dataclass
class MemoryDiff:
    """A write to memory: the offset and the bytes written."""

    off: int
    data: bytes = b""


@dataclass
class StorageChange:
    """A write to storage: the slot key and the value stored."""

    key: bytes
    val: bytes


@dataclass
class ExecutedOperation:
    """What executing one operation did."""

    used: int
    push: bytes = b""
    mem: Optional[MemoryDiff] = None
    store: Optional[StorageChange] = None


@dataclass
class VmOperation:
    """One operation of a VM trace, with the trace of any call it made."""

    pc: int
    cost: int
    op: str
    ex: Optional[ExecutedOperation] = None
    sub: Optional["VmTrace"] = None


@dataclass
class VmTrace:
    """The operations executed by one frame of a transaction."""

    ops: list[VmOperation] = field(default_factory=list)


def _walk(vm_trace: VmTrace) -> Iterator[VmOperation]:
    """Yield operations depth first, each followed by the operations of its sub-trace."""
    stack = [iter(vm_trace.ops)]
    while stack:
        operation = next(stack[-1], None)
        if operation is None:
            stack.pop()
            continue
        yield operation
        if operation.sub is not None:
            stack.append(iter(operation.sub.ops))


def process_vm_traces(
    block_number: Optional[int],
    transaction_hash: Optional[bytes],
    traces: Iterable[Optional[VmTrace]],
    store: ColumnStore,
) -> None:
    """Store one row per executed operation; a None entry stands for a missing trace."""
    tx_hash = None if transaction_hash is None else bytes(transaction_hash)
    for tx_pos, vm_trace in enumerate(traces):
        if vm_trace is None:
            continue
        for operation in _walk(vm_trace):
            store.add_row()
            store.store("block_number", block_number)
            store.store("transaction_hash", tx_hash)
            store.store("transaction_index", tx_pos)
            store.store("pc", operation.pc)
            store.store("cost", operation.cost)

            executed = operation.ex
            used = push = mem_off = mem_data = storage_key = storage_val = None
            if executed is not None:
                used = executed.used
                push = bytes(executed.push)
                if executed.mem is not None:
                    mem_off = executed.mem.off
                    mem_data = bytes(executed.mem.data)
                if executed.store is not None:
                    storage_key = bytes(executed.store.key)
                    storage_val = bytes(executed.store.val)
            store.store("used", used)
            store.store("push", push)
            store.store("mem_off", mem_off)
            store.store("mem_data", mem_data)
            store.store("storage_key", storage_key)
            store.store("storage_val", storage_val)
            store.store("op", operation.op)