import pytest

from chainfreeze.records import ColumnStore, Dataset, Table
from chainfreeze.state_diffs import (
    AccountDiff,
    Diff,
    DiffKind,
    StateDiffTrace,
    process_balance_diffs,
    process_code_diffs,
    process_nonce_diffs,
)

COLUMNS = (
    "block_number",
    "transaction_index",
    "transaction_hash",
    "address",
    "from_value",
    "to_value",
)

ADDR_A = b"\x01" * 20
ADDR_B = b"\x02" * 20
TX_1 = b"\xaa" * 32
TX_2 = b"\xbb" * 32


def make_store(dataset):
    return ColumnStore(Table(dataset, COLUMNS))


def test_diff_constructors():
    assert Diff.same().kind is DiffKind.SAME
    born = Diff.born(5)
    assert (born.kind, born.old, born.new) == (DiffKind.BORN, None, 5)
    died = Diff.died(7)
    assert (died.kind, died.old, died.new) == (DiffKind.DIED, 7, None)
    changed = Diff.changed(1, 2)
    assert (changed.old, changed.new) == (1, 2)


def test_balance_diff_kinds():
    trace = StateDiffTrace(
        {
            ADDR_A: AccountDiff(balance=Diff.born(100)),
            ADDR_B: AccountDiff(balance=Diff.died(40)),
        }
    )
    store = make_store(Dataset.BALANCE_DIFFS)
    process_balance_diffs(12, [TX_1], [trace], store)
    assert len(store) == 2
    assert store["from_value"] == [0, 40]
    assert store["to_value"] == [100, 0]
    assert store["address"] == [ADDR_A, ADDR_B]
    assert store["block_number"] == [12, 12]
    assert store["transaction_hash"] == [TX_1, TX_1]


def test_balance_same_is_skipped_and_changed_kept():
    trace = StateDiffTrace(
        {
            ADDR_A: AccountDiff(balance=Diff.same()),
            ADDR_B: AccountDiff(balance=Diff.changed(3, 9)),
        }
    )
    store = make_store(Dataset.BALANCE_DIFFS)
    process_balance_diffs(None, [None], [trace], store)
    assert len(store) == 1
    assert store["address"] == [ADDR_B]
    assert store["from_value"] == [3]
    assert store["to_value"] == [9]
    assert store["transaction_hash"] == [None]
    assert store["block_number"] == [None]


def test_addresses_are_sorted():
    trace = StateDiffTrace(
        {
            ADDR_B: AccountDiff(balance=Diff.born(1)),
            ADDR_A: AccountDiff(balance=Diff.born(2)),
        }
    )
    store = make_store(Dataset.BALANCE_DIFFS)
    process_balance_diffs(1, [TX_1], [trace], store)
    assert store["address"] == sorted(store["address"])
    assert store["to_value"] == [2, 1]


def test_transaction_index_counts_traces_without_diff():
    traces = [
        StateDiffTrace(None),
        StateDiffTrace({ADDR_A: AccountDiff(balance=Diff.born(1))}),
    ]
    store = make_store(Dataset.BALANCE_DIFFS)
    process_balance_diffs(1, [TX_1, TX_2], traces, store)
    assert store["transaction_index"] == [1]
    assert store["transaction_hash"] == [TX_2]


def test_traces_beyond_hashes_are_ignored():
    traces = [
        StateDiffTrace({ADDR_A: AccountDiff(balance=Diff.born(1))}),
        StateDiffTrace({ADDR_B: AccountDiff(balance=Diff.born(2))}),
    ]
    store = make_store(Dataset.BALANCE_DIFFS)
    process_balance_diffs(1, [TX_1], traces, store)
    assert len(store) == 1
    assert store["address"] == [ADDR_A]


def test_code_diffs():
    trace = StateDiffTrace(
        {
            ADDR_A: AccountDiff(code=Diff.born(b"\x60\x00")),
            ADDR_B: AccountDiff(code=Diff.died(b"\x60\x01")),
        }
    )
    store = make_store(Dataset.CODE_DIFFS)
    process_code_diffs(5, [TX_1], [trace], store)
    assert store["from_value"] == [b"", b"\x60\x01"]
    assert store["to_value"] == [b"\x60\x00", b""]


def test_code_born_empty_is_skipped():
    trace = StateDiffTrace(
        {
            ADDR_A: AccountDiff(code=Diff.born(b"")),
            ADDR_B: AccountDiff(code=Diff.changed(b"\x01", b"\x02")),
        }
    )
    store = make_store(Dataset.CODE_DIFFS)
    process_code_diffs(5, [TX_1], [trace], store)
    assert len(store) == 1
    assert store["address"] == [ADDR_B]
    assert store["from_value"] == [b"\x01"]
    assert store["to_value"] == [b"\x02"]


def test_nonce_diffs():
    trace = StateDiffTrace(
        {
            ADDR_A: AccountDiff(nonce=Diff.changed(4, 5)),
            ADDR_B: AccountDiff(nonce=Diff.born(1)),
        }
    )
    store = make_store(Dataset.NONCE_DIFFS)
    process_nonce_diffs(8, [TX_1], [trace], store)
    assert store["from_value"] == [4, 0]
    assert store["to_value"] == [5, 1]


def test_nonce_overflow_raises():
    trace = StateDiffTrace({ADDR_A: AccountDiff(nonce=Diff.born(2**64))})
    store = make_store(Dataset.NONCE_DIFFS)
    with pytest.raises(OverflowError):
        process_nonce_diffs(8, [TX_1], [trace], store)


def test_unselected_columns_are_not_kept():
    trace = StateDiffTrace({ADDR_A: AccountDiff(balance=Diff.born(1))})
    store = ColumnStore(Table(Dataset.BALANCE_DIFFS, ("address",)))
    process_balance_diffs(1, [TX_1], [trace], store)
    assert store.to_dict() == {"address": [ADDR_A]}
    assert len(store) == 1