from chainfreeze.address_appearances import (
    EVENT_ERC20_TRANSFER,
    process_appearances,
    transfer_name,
)
from chainfreeze.records import (
    Block,
    CallAction,
    ColumnStore,
    CreateAction,
    CreateResult,
    Dataset,
    Log,
    RewardAction,
    SuicideAction,
    Table,
    Trace,
)

COLUMNS = ("block_number", "block_hash", "transaction_hash", "address", "relationship")

MINER = b"\x0a" * 20
A = b"\x01" * 20
B = b"\x02" * 20
C = b"\x03" * 20
TX1 = b"\x11" * 32
TX2 = b"\x22" * 32
BLOCK_HASH = b"\x44" * 32


def make_store():
    return ColumnStore(Table(Dataset.ADDRESS_APPEARANCES, COLUMNS))


def topic(address):
    return bytes(12) + address


def trace(action, tx_hash, result=None, trace_address=(), position=0):
    return Trace(
        action=action,
        result=result,
        trace_address=trace_address,
        transaction_position=position,
        transaction_hash=tx_hash,
        block_number=50,
        block_hash=BLOCK_HASH,
    )


def test_transfer_topic_constant():
    assert EVENT_ERC20_TRANSFER.hex() == (
        "ddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
    )


def test_transfer_name():
    erc20 = Log(A, topics=[EVENT_ERC20_TRANSFER, topic(A), topic(B)], data=bytes(32))
    erc721 = Log(A, topics=[EVENT_ERC20_TRANSFER, topic(A), topic(B), bytes(32)])
    neither = Log(A, topics=[EVENT_ERC20_TRANSFER, topic(A), topic(B)])
    other = Log(A, topics=[bytes(32), topic(A), topic(B)], data=bytes(32))
    assert transfer_name(erc20) == "erc20_transfer"
    assert transfer_name(erc721) == "erc721_transfer"
    assert transfer_name(neither) is None
    assert transfer_name(other) is None
    assert transfer_name(Log(A)) is None


def test_missing_author_yields_nothing():
    store = make_store()
    traces = [trace(CallAction(A, B), TX1)]
    process_appearances(Block(number=50, author=None), [], traces, store)
    assert len(store) == 0
    assert store.to_dict()["address"] == []


def test_call_transaction_relationships():
    store = make_store()
    traces = [
        trace(CallAction(A, B), TX1),
        trace(CreateAction(B), TX1, result=CreateResult(C), trace_address=(0,)),
    ]
    process_appearances(Block(number=50, author=MINER), [], traces, store)
    data = store.to_dict()
    assert list(zip(data["address"], data["relationship"])) == [
        (MINER, "miner_fee"),
        (A, "tx_from"),
        (B, "tx_to"),
        (A, "call_from"),
        (B, "call_to"),
        (B, "factory"),
        (C, "create"),
    ]
    assert set(data["transaction_hash"]) == {TX1}
    assert set(data["block_number"]) == {50}
    assert set(data["block_hash"]) == {BLOCK_HASH}
    assert len(store) == 7


def test_create_transaction_records_created_address_as_tx_to():
    store = make_store()
    traces = [trace(CreateAction(A), TX1, result=CreateResult(C))]
    process_appearances(Block(number=50, author=MINER), [], traces, store)
    data = store.to_dict()
    assert list(zip(data["address"], data["relationship"])) == [
        (MINER, "miner_fee"),
        (A, "tx_from"),
        (C, "tx_to"),
        (A, "factory"),
        (C, "create"),
    ]


def test_token_logs_add_rows_for_first_trace_only():
    store = make_store()
    log = Log(
        A,
        topics=[EVENT_ERC20_TRANSFER, topic(B), topic(C)],
        data=bytes(32),
        transaction_hash=TX1,
    )
    traces = [
        trace(CallAction(A, B), TX1),
        trace(CallAction(B, C), TX1, trace_address=(0,)),
    ]
    process_appearances(Block(number=50, author=MINER), [log], traces, store)
    relationships = store.to_dict()["relationship"]
    assert relationships.count("erc20_transfer_from") == 1
    assert relationships.count("miner_fee") == 1
    addresses = store.to_dict()["address"]
    index = relationships.index("erc20_transfer_from")
    assert addresses[index] == B
    assert addresses[index + 1] == B
    assert relationships[index + 1].startswith("erc20_transfer_from")


def test_logs_with_few_topics_are_ignored():
    store = make_store()
    log = Log(A, topics=[EVENT_ERC20_TRANSFER, topic(B)], data=bytes(32), transaction_hash=TX1)
    process_appearances(Block(number=50, author=MINER), [log], [trace(CallAction(A, B), TX1)], store)
    assert not any("transfer" in r for r in store.to_dict()["relationship"])


def test_new_transaction_gets_miner_fee_and_untracked_traces_skipped():
    store = make_store()
    traces = [
        trace(SuicideAction(A, B), TX1),
        trace(RewardAction(C), None, position=None),
        trace(CallAction(B, A), TX2, position=1),
    ]
    process_appearances(Block(number=50, author=MINER), [], traces, store)
    data = store.to_dict()
    assert data["relationship"].count("miner_fee") == 2
    assert "author" not in data["relationship"]
    assert (A, "suicide") in zip(data["address"], data["relationship"])
    assert (B, "suicide_refund") in zip(data["address"], data["relationship"])
    assert data["transaction_hash"][-1] == TX2
    assert len(store) == len(data["address"])