"""Balance, code, nonce and storage values read during execution (prestate traces)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Mapping, Optional

from .records import ColumnStore

_U64_MAX = 2**64 - 1

PrestateTrace = Mapping[bytes, "AccountState"]


@dataclass
class AccountState:
    """The state of one account as it was read by a transaction."""

    balance: Optional[int] = None
    code: Optional[bytes] = None
    nonce: Optional[int] = None
    storage: Optional[dict[bytes, bytes]] = None


def _as_u64(value: int) -> int:
    if not 0 <= value <= _U64_MAX:
        raise OverflowError(f"nonce does not fit in 64 bits: {value}")
    return value


def _accounts(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[PrestateTrace],
) -> Iterator[tuple[dict, bytes, AccountState]]:
    """Yield the shared row prefix, address and state of every account read."""
    for index, (trace, tx_hash) in enumerate(zip(traces, transaction_hashes)):
        prefix = {
            "block_number": block_number,
            "transaction_index": index,
            "transaction_hash": None if tx_hash is None else bytes(tx_hash),
        }
        for address in sorted(trace, key=bytes):
            yield prefix, bytes(address), trace[address]


def _write(store: ColumnStore, prefix: dict, **values) -> None:
    store.add_row()
    for name, value in prefix.items():
        store.store(name, value)
    for name, value in values.items():
        store.store(name, value)


def _process_single(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[PrestateTrace],
    store: ColumnStore,
    row: Callable[[bytes, AccountState], Optional[dict]],
) -> None:
    for prefix, address, state in _accounts(block_number, transaction_hashes, traces):
        values = row(address, state)
        if values is not None:
            _write(store, prefix, **values)


def process_balance_reads(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[PrestateTrace],
    store: ColumnStore,
) -> None:
    """Store one row per account whose balance was read."""

    def row(address: bytes, state: AccountState) -> Optional[dict]:
        if state.balance is None:
            return None
        return {"address": address, "balance": state.balance}

    _process_single(block_number, transaction_hashes, traces, store, row)


def process_code_reads(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[PrestateTrace],
    store: ColumnStore,
) -> None:
    """Store one row per contract whose code was read."""

    def row(address: bytes, state: AccountState) -> Optional[dict]:
        if state.code is None:
            return None
        return {"contract_address": address, "code": bytes(state.code)}

    _process_single(block_number, transaction_hashes, traces, store, row)


def process_nonce_reads(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[PrestateTrace],
    store: ColumnStore,
) -> None:
    """Store one row per account whose nonce was read."""

    def row(address: bytes, state: AccountState) -> Optional[dict]:
        if state.nonce is None:
            return None
        return {"address": address, "nonce": _as_u64(state.nonce)}

    _process_single(block_number, transaction_hashes, traces, store, row)


def process_storage_reads(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[PrestateTrace],
    store: ColumnStore,
) -> None:
    """Store one row per storage slot that was read, in slot order."""
    for prefix, address, state in _accounts(block_number, transaction_hashes, traces):
        if state.storage is None:
            continue
        for slot in sorted(state.storage, key=bytes):
            _write(
                store,
                prefix,
                contract_address=address,
                slot=bytes(slot),
                value=bytes(state.storage[slot]),
            )