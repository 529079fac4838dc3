# chainfreeze

chainfreeze turns EVM chain data that you already hold into column-oriented
tables. You pass in blocks, transactions, logs, parity-style traces, state
diffs, prestate reads, VM traces or geth debug-trace results as Python
objects. You get back one list of values per column, ready for any dataframe
library or file writer.

Every processing function fills a `ColumnStore`. A store is built from a
`Table`, which names a `Dataset` and the columns to collect. A value for a
column that the table does not name is dropped, so only the columns you ask
for are kept.

## Installation

```
pip install chainfreeze
```

To run the tests:

```
pip install "chainfreeze[test]"
pytest
```

## Usage

```python
from chainfreeze.records import CallAction, ColumnStore, Dataset, Table, Trace
from chainfreeze.traces import filter_failed_traces, process_traces

traces = [
    Trace(
        action=CallAction(from_address=bytes(20), to_address=b"\x11" * 20, value=5),
        block_number=1,
    ),
]

table = Table(Dataset.TRACES, ("block_number", "action_from", "action_value"))
store = ColumnStore(table)

process_traces(filter_failed_traces(traces), store)
store.to_dict()
# {"block_number": [1], "action_from": [b"\x00" * 20], "action_value": ["5"]}
len(store)   # 1, the number of rows added
```

`ColumnStore` counts rows with `add_row()`, appends values with
`store(name, value)`, returns copies of all columns with `to_dict()`, and
returns a single column with `store[name]`.

`filter_failed_traces` drops every trace that errored. It also drops every
trace nested under an errored trace. Call it before processing if you only
want successful execution.

## Modules

| module | contents |
| --- | --- |
| `chainfreeze.records` | `Dataset`, `Table`, `ColumnStore`, `keccak256`, and the record types `Block`, `Transaction`, `Receipt`, `Log`, `Trace`, the trace actions (`CallAction`, `CreateAction`, `SuicideAction`, `RewardAction`), the trace results (`CallResult`, `CreateResult`), and the enums `CallType`, `ActionType` and `RewardType` |
| `chainfreeze.traces` | `process_traces`, `filter_failed_traces`, `filter_traces_by_from_to_addresses`, and the enum-to-string helpers |
| `chainfreeze.contracts` | `process_contracts`: one row per successful contract creation in traces |
| `chainfreeze.native_transfers` | `process_native_transfers`: one row per trace, with the value it moves |
| `chainfreeze.trace_calls` | `TransactionTrace`, `process_trace_calls`: the traces of one simulated call |
| `chainfreeze.address_appearances` | `process_appearances`, `transfer_name`: each address a block's logs and traces touch, with its relationship (`miner_fee`, `tx_from`, `call_to`, `factory`, `suicide`, `author`, `create`, ...) |
| `chainfreeze.state_diffs` | `DiffKind`, `Diff`, `AccountDiff`, `StateDiffTrace`, `process_balance_diffs`, `process_code_diffs`, `process_nonce_diffs` |
| `chainfreeze.storage_diffs` | `process_storage_diffs` |
| `chainfreeze.state_reads` | `AccountState`, `process_balance_reads`, `process_code_reads`, `process_nonce_reads`, `process_storage_reads` |
| `chainfreeze.transactions` | `process_transaction`, `tx_success`, `filter_transactions`, `rlp_encode` |
| `chainfreeze.vm_traces` | `VmTrace`, `VmOperation`, `ExecutedOperation`, `MemoryDiff`, `StorageChange`, `process_vm_traces` |
| `chainfreeze.logs` | `process_logs`, `process_erc20_transfers`, `process_erc20_approvals`, `process_erc721_transfers`, the `is_*` event tests, `address_topic` |
| `chainfreeze.geth` | `CallFrame`, `StructLog`, `DefaultFrame`, `process_geth_calls`, `process_geth_opcodes`, `process_four_byte_counts`, `parse_signature_size`, `process_javascript_traces` |
| `chainfreeze.blocks` | `process_block`: one row per block header |

## Conventions

- Addresses, hashes, topics, code and call data are stored as `bytes`.
- Trace addresses are stored as strings. Parity traces join them with `_`.
  Geth call frames join them with spaces, and geth opcode rows store an
  empty string.
- Values, balances and token ids are stored as Python `int`s. In the traces
  and trace_calls tables, action values are stored as decimal strings.
- Diffs, reads and 4byte counts are emitted in a fixed order: by account
  address, then by storage slot or signature key.
- Geth opcode `memory`, `stack` and `storage`, and JavaScript tracer output,
  are stored as compact JSON strings with sorted keys.
- Errors are raised as exceptions. `tx_success` raises `ValueError` when a
  transaction's status cannot be determined. `parse_signature_size` raises
  `ValueError` for a malformed key. Nonces that do not fit in 64 bits raise
  `OverflowError`.

## What it does not do

- It does not connect to a node. All chain data must be fetched by you and
  passed in as the record types above.
- It does not write files. `ColumnStore.to_dict()` is the output.
- It has no command-line interface.
- It does not fill the `chain_id` column, and it does not decode event
  parameters from logs.
- `Dataset` lists more datasets than there are processing functions. The
  package has no processing for `balances`, `codes`, `slots`, `nonces`,
  `eth_calls`, the ERC-20/ERC-721 balance, supply and metadata datasets, or
  the `geth_*_diffs` datasets.