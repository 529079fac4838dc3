"""Balance, code and nonce changes taken from state-diff traces."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from .records import ColumnStore

_U64_MAX = 2**64 - 1


class DiffKind(Enum):
    """How a value changed during a transaction."""

    SAME = "same"
    BORN = "born"
    DIED = "died"
    CHANGED = "changed"


@dataclass(frozen=True)
class Diff:
    """A change of one value: its kind, the value before and the value after."""

    kind: DiffKind = DiffKind.SAME
    old: Any = None
    new: Any = None

    @classmethod
    def same(cls) -> Diff:
        return cls(DiffKind.SAME)

    @classmethod
    def born(cls, value: Any) -> Diff:
        return cls(DiffKind.BORN, new=value)

    @classmethod
    def died(cls, value: Any) -> Diff:
        return cls(DiffKind.DIED, old=value)

    @classmethod
    def changed(cls, old: Any, new: Any) -> Diff:
        return cls(DiffKind.CHANGED, old=old, new=new)


@dataclass
class AccountDiff:
    """Every change made to one account."""

    balance: Diff = field(default_factory=Diff)
    nonce: Diff = field(default_factory=Diff)
    code: Diff = field(default_factory=Diff)
    storage: dict[bytes, Diff] = field(default_factory=dict)


@dataclass
class StateDiffTrace:
    """The state diff of one transaction, keyed by account address."""

    state_diff: Optional[dict[bytes, AccountDiff]] = None


def _endpoints(diff: Diff, empty: Any) -> Optional[tuple[Any, Any]]:
    if diff.kind is DiffKind.SAME:
        return None
    if diff.kind is DiffKind.BORN:
        return empty, diff.new
    if diff.kind is DiffKind.DIED:
        return diff.old, empty
    return diff.old, diff.new


def _balance_endpoints(account: AccountDiff) -> Optional[tuple[Any, Any]]:
    return _endpoints(account.balance, 0)


def _code_endpoints(account: AccountDiff) -> Optional[tuple[Any, Any]]:
    diff = account.code
    # accounts born without code are plain accounts, not contracts
    if diff.kind is DiffKind.BORN and not diff.new:
        return None
    row = _endpoints(diff, b"")
    if row is None:
        return None
    return bytes(row[0]), bytes(row[1])


def _as_u64(value: int) -> int:
    if not 0 <= value <= _U64_MAX:
        raise OverflowError(f"nonce does not fit in 64 bits: {value}")
    return value


def _nonce_endpoints(account: AccountDiff) -> Optional[tuple[Any, Any]]:
    row = _endpoints(account.nonce, 0)
    if row is None:
        return None
    return _as_u64(row[0]), _as_u64(row[1])


def _process(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[StateDiffTrace],
    store: ColumnStore,
    endpoints: Callable[[AccountDiff], Optional[tuple[Any, Any]]],
) -> None:
    for index, (trace, tx_hash) in enumerate(zip(traces, transaction_hashes)):
        if trace.state_diff is None:
            continue
        for address in sorted(trace.state_diff, key=bytes):
            row = endpoints(trace.state_diff[address])
            if row is None:
                continue
            from_value, to_value = row
            store.add_row()
            store.store("block_number", block_number)
            store.store("transaction_index", index)
            store.store("transaction_hash", None if tx_hash is None else bytes(tx_hash))
            store.store("address", bytes(address))
            store.store("from_value", from_value)
            store.store("to_value", to_value)


def process_balance_diffs(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[StateDiffTrace],
    store: ColumnStore,
) -> None:
    """Store one row per changed account balance."""
    _process(block_number, transaction_hashes, traces, store, _balance_endpoints)


def process_code_diffs(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[StateDiffTrace],
    store: ColumnStore,
) -> None:
    """Store one row per changed contract code."""
    _process(block_number, transaction_hashes, traces, store, _code_endpoints)


def process_nonce_diffs(
    block_number: Optional[int],
    transaction_hashes: Iterable[Optional[bytes]],
    traces: Iterable[StateDiffTrace],
    store: ColumnStore,
) -> None:
    """Store one row per changed account nonce."""
    _process(block_number, transaction_hashes, traces, store, _nonce_endpoints)