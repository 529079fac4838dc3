"""Core record types: datasets, column selection, column storage and chain data."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from Crypto.Hash import keccak


def keccak256(data: bytes) -> bytes:
    """Return the 32-byte Keccak-256 digest of ``data``."""
    hasher = keccak.new(digest_bits=256)
    hasher.update(bytes(data))
    return hasher.digest()


class Dataset(str, Enum):
    """Every dataset that can be collected."""

    ADDRESS_APPEARANCES = "address_appearances"
    BALANCE_DIFFS = "balance_diffs"
    BALANCE_READS = "balance_reads"
    BALANCES = "balances"
    BLOCKS = "blocks"
    CODE_DIFFS = "code_diffs"
    CODE_READS = "code_reads"
    CODES = "codes"
    CONTRACTS = "contracts"
    ERC20_APPROVALS = "erc20_approvals"
    ERC20_BALANCES = "erc20_balances"
    ERC20_METADATA = "erc20_metadata"
    ERC20_SUPPLIES = "erc20_supplies"
    ERC20_TRANSFERS = "erc20_transfers"
    ERC721_METADATA = "erc721_metadata"
    ERC721_TRANSFERS = "erc721_transfers"
    ETH_CALLS = "eth_calls"
    FOUR_BYTE_COUNTS = "four_byte_counts"
    GETH_BALANCE_DIFFS = "geth_balance_diffs"
    GETH_CALLS = "geth_calls"
    GETH_CODE_DIFFS = "geth_code_diffs"
    GETH_NONCE_DIFFS = "geth_nonce_diffs"
    GETH_OPCODES = "geth_opcodes"
    GETH_STORAGE_DIFFS = "geth_storage_diffs"
    JAVASCRIPT_TRACES = "javascript_traces"
    LOGS = "logs"
    NATIVE_TRANSFERS = "native_transfers"
    NONCE_DIFFS = "nonce_diffs"
    NONCE_READS = "nonce_reads"
    NONCES = "nonces"
    SLOTS = "slots"
    STORAGE_DIFFS = "storage_diffs"
    STORAGE_READS = "storage_reads"
    TRACE_CALLS = "trace_calls"
    TRACES = "traces"
    TRANSACTIONS = "transactions"
    VM_TRACES = "vm_traces"


@dataclass(frozen=True)
class Table:
    """The columns selected for one dataset."""

    datatype: Dataset
    columns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))

    def has_column(self, name: str) -> bool:
        return name in self.columns


class ColumnStore:
    """Column-oriented storage that keeps only the columns its table selects."""

    def __init__(self, table: Table) -> None:
        self.table = table
        self.n_rows = 0
        self._columns: dict[str, list[Any]] = {name: [] for name in table.columns}

    def store(self, name: str, value: Any) -> None:
        column = self._columns.get(name)
        if column is not None:
            column.append(value)

    def add_row(self) -> None:
        self.n_rows += 1

    def to_dict(self) -> dict[str, list[Any]]:
        return {name: list(values) for name, values in self._columns.items()}

    def __getitem__(self, name: str) -> list[Any]:
        return self._columns[name]

    def __len__(self) -> int:
        return self.n_rows


class CallType(Enum):
    NONE = "none"
    CALL = "call"
    CALL_CODE = "call_code"
    DELEGATE_CALL = "delegate_call"
    STATIC_CALL = "static_call"


class ActionType(Enum):
    CALL = "call"
    CREATE = "create"
    REWARD = "reward"
    SUICIDE = "suicide"


class RewardType(Enum):
    BLOCK = "block"
    UNCLE = "uncle"
    EMPTY_STEP = "empty_step"
    EXTERNAL = "external"


@dataclass
class CallAction:
    from_address: bytes
    to_address: bytes
    value: int = 0
    gas: int = 0
    input: bytes = b""
    call_type: CallType = CallType.CALL


@dataclass
class CreateAction:
    from_address: bytes
    value: int = 0
    gas: int = 0
    init: bytes = b""


@dataclass
class SuicideAction:
    address: bytes
    refund_address: bytes
    balance: int = 0


@dataclass
class RewardAction:
    author: bytes
    value: int = 0
    reward_type: RewardType = RewardType.BLOCK


@dataclass
class CallResult:
    gas_used: int = 0
    output: bytes = b""


@dataclass
class CreateResult:
    address: bytes
    gas_used: int = 0
    code: bytes = b""


Action = Union[CallAction, CreateAction, SuicideAction, RewardAction]
TraceResult = Optional[Union[CallResult, CreateResult]]

_ACTION_TYPES = {
    CallAction: ActionType.CALL,
    CreateAction: ActionType.CREATE,
    SuicideAction: ActionType.SUICIDE,
    RewardAction: ActionType.REWARD,
}


@dataclass
class Trace:
    """One parity-style trace entry."""

    action: Action
    result: TraceResult = None
    trace_address: tuple[int, ...] = ()
    subtraces: int = 0
    transaction_position: Optional[int] = None
    transaction_hash: Optional[bytes] = None
    block_number: int = 0
    block_hash: bytes = bytes(32)
    error: Optional[str] = None

    def __post_init__(self) -> None:
        self.trace_address = tuple(self.trace_address)

    @property
    def action_type(self) -> ActionType:
        return _ACTION_TYPES[type(self.action)]


@dataclass
class Log:
    address: bytes
    topics: list[bytes] = field(default_factory=list)
    data: bytes = b""
    block_number: Optional[int] = None
    block_hash: Optional[bytes] = None
    transaction_hash: Optional[bytes] = None
    transaction_index: Optional[int] = None
    log_index: Optional[int] = None


@dataclass
class Transaction:
    hash: bytes
    from_address: bytes
    to_address: Optional[bytes] = None
    nonce: int = 0
    value: int = 0
    input: bytes = b""
    gas: int = 0
    gas_price: Optional[int] = None
    block_number: Optional[int] = None
    block_hash: Optional[bytes] = None
    transaction_index: Optional[int] = None
    transaction_type: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    chain_id: Optional[int] = None
    access_list: list[tuple[bytes, list[bytes]]] = field(default_factory=list)
    v: int = 0
    r: int = 0
    s: int = 0


@dataclass
class Receipt:
    transaction_hash: Optional[bytes] = None
    status: Optional[int] = None
    gas_used: Optional[int] = None
    logs: list[Log] = field(default_factory=list)


@dataclass
class Block:
    hash: Optional[bytes] = None
    parent_hash: bytes = bytes(32)
    uncles_hash: bytes = bytes(32)
    author: Optional[bytes] = None
    state_root: bytes = bytes(32)
    transactions_root: bytes = bytes(32)
    receipts_root: bytes = bytes(32)
    number: Optional[int] = None
    gas_used: int = 0
    gas_limit: int = 0
    extra_data: bytes = b""
    logs_bloom: Optional[bytes] = None
    timestamp: int = 0
    difficulty: int = 0
    total_difficulty: Optional[int] = None
    size: Optional[int] = None
    mix_hash: Optional[bytes] = None
    nonce: Optional[bytes] = None
    base_fee_per_gas: Optional[int] = None
    withdrawals_root: Optional[bytes] = None
    transactions: list[Any] = field(default_factory=list)