from chainfreeze.contracts import process_contracts
from chainfreeze.records import (
    CallAction,
    ColumnStore,
    CreateAction,
    CreateResult,
    Dataset,
    RewardAction,
    Table,
    Trace,
    keccak256,
)

DEPLOYER = bytes([0xAA]) * 20
FACTORY = bytes([0xBB]) * 20
CONTRACT_1 = bytes([0x01]) * 20
CONTRACT_2 = bytes([0x02]) * 20
INIT = b"\x60\x80\x60\x40"
CODE = b"\x60\x80"

COLUMNS = (
    "block_number",
    "block_hash",
    "create_index",
    "transaction_hash",
    "contract_address",
    "deployer",
    "factory",
    "init_code",
    "code",
    "init_code_hash",
    "n_init_code_bytes",
    "n_code_bytes",
    "code_hash",
)


def make_store():
    return ColumnStore(Table(Dataset.CONTRACTS, COLUMNS))


def sample_traces():
    return [
        Trace(CallAction(DEPLOYER, FACTORY), trace_address=(), block_number=5),
        Trace(
            CreateAction(FACTORY, init=INIT),
            result=CreateResult(CONTRACT_1, code=CODE),
            trace_address=(0,),
            block_number=5,
            transaction_hash=bytes([9]) * 32,
        ),
        Trace(CreateAction(FACTORY, init=INIT), result=None, trace_address=(1,)),
        Trace(
            CreateAction(DEPLOYER, init=INIT),
            result=CreateResult(CONTRACT_2, code=b""),
            trace_address=(),
            block_number=6,
        ),
    ]


def test_contract_rows():
    store = make_store()
    process_contracts(sample_traces(), store)
    cols = store.to_dict()
    assert store.n_rows == 2
    assert cols["contract_address"] == [CONTRACT_1, CONTRACT_2]
    assert cols["create_index"] == [0, 1]
    assert cols["deployer"] == [DEPLOYER, DEPLOYER]
    assert cols["factory"] == [FACTORY, DEPLOYER]
    assert cols["block_number"] == [5, 6]
    assert cols["transaction_hash"] == [bytes([9]) * 32, None]


def test_contract_byte_counts_and_hashes():
    store = make_store()
    process_contracts(sample_traces(), store)
    cols = store.to_dict()
    assert cols["n_init_code_bytes"] == [len(INIT), len(INIT)]
    assert cols["n_code_bytes"] == [len(CODE), 0]
    assert cols["init_code"] == [INIT, INIT]
    assert cols["code"] == [CODE, b""]
    assert cols["init_code_hash"][0] == keccak256(CODE)
    assert cols["code_hash"][0] == keccak256(INIT)


def test_deployer_follows_root_trace():
    reward_author = bytes([0xCC]) * 20
    traces = [
        Trace(RewardAction(reward_author), trace_address=()),
        Trace(
            CreateAction(FACTORY),
            result=CreateResult(CONTRACT_1),
            trace_address=(0,),
        ),
    ]
    store = make_store()
    process_contracts(traces, store)
    assert store["deployer"] == [reward_author]


def test_create_without_prior_root_uses_zero_deployer():
    traces = [Trace(CreateAction(FACTORY), result=CreateResult(CONTRACT_1), trace_address=(0,))]
    store = make_store()
    process_contracts(traces, store)
    assert store["deployer"] == [bytes(20)]


def test_no_creations_no_rows():
    store = make_store()
    process_contracts([Trace(CallAction(DEPLOYER, FACTORY))], store)
    assert store.n_rows == 0
    assert store["contract_address"] == []