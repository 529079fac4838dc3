"""Event logs and the token transfer and approval events decoded from them."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from .address_appearances import EVENT_ERC20_TRANSFER
from .records import ColumnStore, Log, keccak256

EVENT_ERC20_APPROVAL = keccak256(b"Approval(address,address,uint256)")
EVENT_ERC721_TRANSFER = EVENT_ERC20_TRANSFER

_ADDRESS_BYTES = 20
_WORD_BYTES = 32


def address_topic(address: bytes) -> bytes:
    """Left-pad a 20-byte address to the 32-byte topic that indexes it."""
    address = bytes(address)
    if len(address) != _ADDRESS_BYTES:
        raise ValueError(f"address must be {_ADDRESS_BYTES} bytes, got {len(address)}")
    return bytes(_WORD_BYTES - _ADDRESS_BYTES) + address


def _first_topic(log: Log) -> Optional[bytes]:
    return bytes(log.topics[0]) if log.topics else None


def is_erc20_transfer(log: Log) -> bool:
    """Whether a log is an ERC-20 Transfer event."""
    return (
        len(log.topics) == 3
        and len(log.data) == 32
        and _first_topic(log) == EVENT_ERC20_TRANSFER
    )


def is_erc20_approval(log: Log) -> bool:
    """Whether a log is an ERC-20 Approval event."""
    return (
        len(log.topics) == 3
        and len(log.data) == 32
        and _first_topic(log) == EVENT_ERC20_APPROVAL
    )


def is_erc721_transfer(log: Log) -> bool:
    """Whether a log is an ERC-721 Transfer event."""
    return (
        len(log.topics) == 4
        and len(log.data) == 0
        and _first_topic(log) == EVENT_ERC721_TRANSFER
    )


def _located(logs: Iterable[Log]) -> Iterator[Log]:
    """Yield only logs that carry their block, transaction and position."""
    for log in logs:
        if None in (
            log.block_number,
            log.transaction_hash,
            log.transaction_index,
            log.log_index,
        ):
            continue
        yield log


def _store_location(log: Log, store: ColumnStore) -> None:
    store.store("block_number", log.block_number)
    store.store("block_hash", None if log.block_hash is None else bytes(log.block_hash))
    store.store("transaction_index", log.transaction_index)
    store.store("log_index", log.log_index)
    store.store("transaction_hash", bytes(log.transaction_hash))


def process_logs(logs: Iterable[Log], store: ColumnStore) -> None:
    """Store one row per located log, with up to four topics."""
    for log in _located(logs):
        store.add_row()
        _store_location(log, store)
        store.store("address", bytes(log.address))
        store.store("data", bytes(log.data))
        store.store("n_data_bytes", len(log.data))
        for position in range(4):
            topic = bytes(log.topics[position]) if position < len(log.topics) else None
            store.store(f"topic{position}", topic)


def _store_token_event(log: Log, store: ColumnStore) -> None:
    _store_location(log, store)
    store.store("erc20", bytes(log.address))
    store.store("from_address", bytes(log.topics[1])[12:])
    store.store("to_address", bytes(log.topics[2])[12:])


def process_erc20_transfers(logs: Iterable[Log], store: ColumnStore) -> None:
    """Store one row per located ERC-20 transfer log."""
    for log in _located(logs):
        store.add_row()
        _store_token_event(log, store)
        store.store("value", int.from_bytes(bytes(log.data), "big"))


def process_erc20_approvals(logs: Iterable[Log], store: ColumnStore) -> None:
    """Store one row per located ERC-20 approval log."""
    for log in _located(logs):
        store.add_row()
        _store_token_event(log, store)
        store.store("value", int.from_bytes(bytes(log.data), "big"))


def process_erc721_transfers(logs: Iterable[Log], store: ColumnStore) -> None:
    """Store one row per located ERC-721 transfer log."""
    for log in _located(logs):
        store.add_row()
        _store_token_event(log, store)
        store.store("token_id", int.from_bytes(bytes(log.topics[3]), "big"))