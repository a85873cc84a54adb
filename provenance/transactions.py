"""
transactions.py - Per-asset transaction trees

TransactionLedger owns, for every registered asset, an append-only list of
Transaction records. The list is an arena: a transaction's position is
assigned when it is appended and is never reused, reordered or truncated, so
a parent reference is a plain integer position valid for the list's lifetime.

Tree shape follows from append order alone:
    - position 0 is the root (parent_txn_index = ROOT_PARENT_INDEX)
    - every later transaction names a parent strictly below the list length
      at append time, hence strictly below its own position
so no cycle can ever be formed.
"""

from __future__ import annotations
from typing import Dict, List, Tuple

from .core import (
    Transaction,
    ROOT_TXN_INDEX, ROOT_PARENT_INDEX,
    AlreadyExists, InvalidReference, OutOfRange,
)
from .registry import AssetRegistry


class TransactionLedger:
    """
    Append-only transaction sequences, one per asset.

    Records stored here carry no stages; StageRecorder owns those.
    Not thread-safe. ProvenanceLedger serializes access.
    """

    def __init__(self, registry: AssetRegistry):
        self._registry = registry
        self._transactions: Dict[str, List[Transaction]] = {}

    def _sequence(self, asset_id: str) -> List[Transaction]:
        self._registry.require(asset_id)
        return self._transactions.get(asset_id, [])

    def append_root(
        self,
        asset_id: str,
        transaction_id: str,
        transaction_date: str,
        transaction_type: str,
        transaction_owner: str,
        transaction_notes: str,
    ) -> Transaction:
        """
        Append the root transaction for an asset.

        Returns:
            The stored root transaction (index 0)

        Raises:
            NotFound: If the asset is not registered
            AlreadyExists: If the asset already has a root
        """
        if self._sequence(asset_id):
            raise AlreadyExists(f"Asset {asset_id} already has a root transaction")
        tx = Transaction(
            index=ROOT_TXN_INDEX,
            transaction_id=transaction_id,
            transaction_date=transaction_date,
            transaction_type=transaction_type,
            transaction_owner=transaction_owner,
            transaction_notes=transaction_notes,
            parent_txn_index=ROOT_PARENT_INDEX,
        )
        self._transactions[asset_id] = [tx]
        return tx

    def append_child(
        self,
        asset_id: str,
        transaction_id: str,
        transaction_date: str,
        transaction_type: str,
        transaction_owner: str,
        transaction_notes: str,
        parent_txn_index: int,
    ) -> Transaction:
        """
        Append a transaction under an existing parent.

        Returns:
            The stored transaction, at index equal to the previous count

        Raises:
            NotFound: If the asset is not registered
            InvalidReference: If parent_txn_index does not name an existing transaction
        """
        sequence = self._sequence(asset_id)
        if isinstance(parent_txn_index, bool) or not isinstance(parent_txn_index, int):
            raise InvalidReference(f"parent_txn_index must be an int, got {parent_txn_index!r}")
        if not 0 <= parent_txn_index < len(sequence):
            raise InvalidReference(
                f"Asset {asset_id}: parent index {parent_txn_index} does not exist "
                f"({len(sequence)} transactions)"
            )
        tx = Transaction(
            index=len(sequence),
            transaction_id=transaction_id,
            transaction_date=transaction_date,
            transaction_type=transaction_type,
            transaction_owner=transaction_owner,
            transaction_notes=transaction_notes,
            parent_txn_index=parent_txn_index,
        )
        sequence.append(tx)
        return tx

    def count(self, asset_id: str) -> int:
        """
        Number of transactions recorded for an asset.

        Raises:
            NotFound: If the asset is not registered
        """
        return len(self._sequence(asset_id))

    def require_index(self, asset_id: str, index: int) -> None:
        """
        Raise unless index names an existing transaction of the asset.

        Raises:
            NotFound: If the asset is not registered
            OutOfRange: If index is negative or not below the current count
        """
        length = len(self._sequence(asset_id))
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < length:
            raise OutOfRange(
                f"Asset {asset_id}: transaction index {index!r} out of range ({length} transactions)"
            )

    def get_by_index(self, asset_id: str, index: int) -> Transaction:
        """
        Return the transaction stored at a position.

        Raises:
            NotFound: If the asset is not registered
            OutOfRange: If index is negative or not below the current count
        """
        self.require_index(asset_id, index)
        return self._transactions[asset_id][index]

    def all(self, asset_id: str) -> Tuple[Transaction, ...]:
        """All transactions of an asset in index order."""
        return tuple(self._sequence(asset_id))

    def children(self, asset_id: str, index: int) -> Tuple[Transaction, ...]:
        """Direct children of a transaction, in index order."""
        self.require_index(asset_id, index)
        return tuple(
            tx for tx in self._transactions[asset_id]
            if not tx.is_root and tx.parent_txn_index == index
        )

    def lineage(self, asset_id: str, index: int) -> Tuple[Transaction, ...]:
        """Path from the root down to the transaction at index, inclusive."""
        self.require_index(asset_id, index)
        sequence = self._transactions[asset_id]
        path = [sequence[index]]
        while not path[-1].is_root:
            path.append(sequence[path[-1].parent_txn_index])
        return tuple(reversed(path))
