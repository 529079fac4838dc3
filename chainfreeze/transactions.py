"""Transactions: filtering, success status, RLP size and columns."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Union

from .records import ColumnStore, Receipt, Transaction

RlpItem = Union[bytes, bytearray, int, Sequence["RlpItem"]]

_BYZANTIUM_BLOCK = 4370000


def _length_prefix(length: int, offset: int) -> bytes:
    if length < 56:
        return bytes([offset + length])
    encoded_length = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([offset + 55 + len(encoded_length)]) + encoded_length


def rlp_encode(item: RlpItem) -> bytes:
    """Encode bytes, non-negative integers and nested lists with RLP."""
    if isinstance(item, bool):
        raise TypeError("booleans cannot be RLP encoded")
    if isinstance(item, int):
        if item < 0:
            raise ValueError("negative integers cannot be RLP encoded")
        item = item.to_bytes((item.bit_length() + 7) // 8, "big")
    if isinstance(item, (bytes, bytearray)):
        data = bytes(item)
        if len(data) == 1 and data[0] < 0x80:
            return data
        return _length_prefix(len(data), 0x80) + data
    if isinstance(item, (list, tuple)):
        payload = b"".join(rlp_encode(element) for element in item)
        return _length_prefix(len(payload), 0xC0) + payload
    raise TypeError(f"cannot RLP encode {type(item).__name__}")


def _optional(value: Optional[RlpItem]) -> RlpItem:
    return b"" if value is None else value


def _normalize_v(v: int, chain_id: int) -> int:
    return v - chain_id * 2 - 35 if v > 1 else v


def _access_list(tx: Transaction) -> list:
    return [[bytes(address), [bytes(key) for key in keys]] for address, keys in tx.access_list]


def _transaction_rlp(tx: Transaction) -> bytes:
    """The signed RLP encoding of a transaction, with its type byte if typed."""
    if tx.transaction_type == 1:
        fields = [
            _optional(tx.chain_id),
            tx.nonce,
            _optional(tx.gas_price),
            tx.gas,
            _optional(tx.to_address),
            tx.value,
            bytes(tx.input),
            _access_list(tx),
        ]
    elif tx.transaction_type == 2:
        fields = [
            _optional(tx.chain_id),
            tx.nonce,
            _optional(tx.max_priority_fee_per_gas),
            _optional(tx.max_fee_per_gas),
            tx.gas,
            _optional(tx.to_address),
            tx.value,
            bytes(tx.input),
            _access_list(tx),
        ]
    else:
        fields = [
            tx.nonce,
            _optional(tx.gas_price),
            tx.gas,
            _optional(tx.to_address),
            tx.value,
            bytes(tx.input),
            tx.v,
        ]
    if tx.transaction_type in (1, 2) and tx.chain_id is not None:
        fields.append(_normalize_v(tx.v, tx.chain_id))
    fields.extend([tx.r, tx.s])
    encoded = rlp_encode(fields)
    if tx.transaction_type in (1, 2):
        return bytes([tx.transaction_type]) + encoded
    return encoded


def filter_transactions(
    transactions: Iterable[Transaction],
    from_address: Optional[bytes],
    to_address: Optional[bytes],
) -> list[Transaction]:
    """Keep transactions sent from and to the given addresses, where given."""

    def keep(tx: Transaction) -> bool:
        if from_address is not None and bytes(tx.from_address) != bytes(from_address):
            return False
        if to_address is not None and (
            tx.to_address is None or bytes(tx.to_address) != bytes(to_address)
        ):
            return False
        return True

    return [tx for tx in transactions if keep(tx)]


def tx_success(tx: Transaction, receipt: Optional[Receipt]) -> bool:
    """Whether a transaction succeeded; raises ValueError when it cannot be told."""
    if receipt is not None and receipt.status is not None:
        return receipt.status == 1
    if (
        tx.chain_id == 1
        and tx.block_number is not None
        and tx.block_number < _BYZANTIUM_BLOCK
        and receipt is not None
        and receipt.gas_used is not None
    ):
        return receipt.gas_used == 0
    raise ValueError("could not determine status of transaction")


def process_transaction(
    tx: Transaction,
    receipt: Optional[Receipt],
    store: ColumnStore,
    exclude_failed: bool,
    timestamp: int,
) -> None:
    """Store one transaction row, skipping failed transactions when asked to."""
    table = store.table
    if exclude_failed or table.has_column("success"):
        success = tx_success(tx, receipt)
        if exclude_failed and not success:
            return
    else:
        success = False

    store.add_row()
    store.store("block_number", tx.block_number)
    store.store("transaction_index", tx.transaction_index)
    store.store("transaction_hash", bytes(tx.hash))
    store.store("from_address", bytes(tx.from_address))
    store.store("to_address", None if tx.to_address is None else bytes(tx.to_address))
    store.store("nonce", tx.nonce)
    store.store("value", tx.value)
    store.store("input", bytes(tx.input))
    store.store("gas_limit", tx.gas)
    store.store("success", success)
    if any(
        table.has_column(name)
        for name in ("n_input_bytes", "n_input_zero_bytes", "n_input_nonzero_bytes")
    ):
        n_input_bytes = len(tx.input)
        n_input_zero_bytes = bytes(tx.input).count(0)
        store.store("n_input_bytes", n_input_bytes)
        store.store("n_input_zero_bytes", n_input_zero_bytes)
        store.store("n_input_nonzero_bytes", n_input_bytes - n_input_zero_bytes)
    if table.has_column("n_rlp_bytes"):
        store.store("n_rlp_bytes", len(_transaction_rlp(tx)))
    store.store("gas_used", None if receipt is None else receipt.gas_used)
    store.store("gas_price", tx.gas_price)
    store.store("transaction_type", tx.transaction_type)
    store.store("max_fee_per_gas", tx.max_fee_per_gas)
    store.store("max_priority_fee_per_gas", tx.max_priority_fee_per_gas)
    store.store("timestamp", timestamp)
    store.store(
        "block_hash", bytes(32) if tx.block_hash is None else bytes(tx.block_hash)
    )