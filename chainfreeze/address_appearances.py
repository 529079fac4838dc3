"""Every address that appears in a block, with the role it played."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Optional

from .records import (
    Block,
    CallAction,
    ColumnStore,
    CreateAction,
    CreateResult,
    Log,
    RewardAction,
    SuicideAction,
    Trace,
    keccak256,
)

EVENT_ERC20_TRANSFER = keccak256(b"Transfer(address,address,uint256)")


def transfer_name(log: Log) -> Optional[str]:
    """Name the kind of token transfer a log records, or None."""
    if not log.topics or bytes(log.topics[0]) != EVENT_ERC20_TRANSFER:
        return None
    if len(log.data) > 0:
        return "erc20_transfer"
    if len(log.topics) == 4:
        return "erc721_transfer"
    return None


class _Appearances:
    def __init__(self, store: ColumnStore) -> None:
        self.store = store

    def address(
        self,
        address: bytes,
        relationship: str,
        block_number: int,
        block_hash: bytes,
        transaction_hash: bytes,
    ) -> None:
        self.store.add_row()
        self.store.store("address", bytes(address))
        self.store.store("relationship", relationship)
        self.store.store("block_number", block_number)
        self.store.store("block_hash", bytes(block_hash))
        self.store.store("transaction_hash", bytes(transaction_hash))

    def first_transaction(
        self,
        block_author: bytes,
        trace: Trace,
        tx_hash: bytes,
        logs_by_tx: dict[bytes, list[Log]],
    ) -> None:
        number = trace.block_number
        block_hash = bytes(trace.block_hash)
        self.address(block_author, "miner_fee", number, block_hash, tx_hash)

        for log in logs_by_tx.get(tx_hash, ()):
            if len(log.topics) < 3:
                continue
            name = transfer_name(log)
            if name is None:
                continue
            sender = bytes(log.topics[1])[12:32]
            from_name = name + "_from"
            self.address(sender, from_name, number, block_hash, tx_hash)
            # the recipient row reads the same topic as the sender row
            recipient = bytes(log.topics[1])[12:32]
            self.address(recipient, from_name + "_to", number, block_hash, tx_hash)

        action = trace.action
        if isinstance(action, CallAction):
            self.address(action.from_address, "tx_from", number, block_hash, tx_hash)
            self.address(action.to_address, "tx_to", number, block_hash, tx_hash)
        elif isinstance(action, CreateAction):
            self.address(action.from_address, "tx_from", number, block_hash, tx_hash)

        if isinstance(trace.result, CreateResult):
            self.address(trace.result.address, "tx_to", number, block_hash, tx_hash)

    def trace(self, trace: Trace, tx_hash: bytes) -> None:
        number = trace.block_number
        block_hash = bytes(trace.block_hash)
        action = trace.action
        if isinstance(action, CallAction):
            self.address(action.from_address, "call_from", number, block_hash, tx_hash)
            self.address(action.to_address, "call_to", number, block_hash, tx_hash)
        elif isinstance(action, CreateAction):
            self.address(action.from_address, "factory", number, block_hash, tx_hash)
        elif isinstance(action, SuicideAction):
            self.address(action.address, "suicide", number, block_hash, tx_hash)
            self.address(action.refund_address, "suicide_refund", number, block_hash, tx_hash)
        elif isinstance(action, RewardAction):
            self.address(action.author, "author", number, block_hash, tx_hash)

        if isinstance(trace.result, CreateResult):
            self.address(trace.result.address, "create", number, block_hash, tx_hash)


def process_appearances(
    block: Block,
    logs: Iterable[Log],
    traces: Iterable[Trace],
    store: ColumnStore,
) -> None:
    """Store one row per address appearance found in a block's logs and traces."""
    logs_by_tx: dict[bytes, list[Log]] = defaultdict(list)
    for log in logs:
        if log.transaction_hash is not None:
            logs_by_tx[bytes(log.transaction_hash)].append(log)

    if block.number is None or block.author is None:
        return
    block_author = bytes(block.author)

    appearances = _Appearances(store)
    current_tx_hash = bytes(32)
    for trace in traces:
        if trace.transaction_hash is None or trace.transaction_position is None:
            continue
        tx_hash = bytes(trace.transaction_hash)
        if tx_hash != current_tx_hash:
            appearances.first_transaction(block_author, trace, tx_hash, logs_by_tx)
        appearances.trace(trace, tx_hash)
        current_tx_hash = tx_hash