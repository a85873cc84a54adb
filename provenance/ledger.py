"""
ledger.py - Provenance Ledger

The ProvenanceLedger class is the public entry point. It composes the three
stores (AssetRegistry -> TransactionLedger -> StageRecorder) and is the only
object callers mutate state through.

Key responsibilities:
    - Exposes the full operation surface (add/get assets, transactions, stages)
    - Serializes every operation touching one asset; different assets proceed
      concurrently
    - Validates before writing, so a rejected operation changes nothing
    - Records every applied write in an operation log, enabling clone() and
      replay() for deterministic reconstruction
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import threading

from .core import (
    # Types
    Asset, Location, Cost, Verification, StorageRequirements,
    Transaction, Stage, AssetDetails,
    Operation, OperationType,
    # Exceptions
    ProvenanceError, NotFound, InvalidArgument,
)
from .registry import AssetRegistry
from .stages import StageRecorder
from .transactions import TransactionLedger


class ProvenanceLedger:
    """
    Append-only chain-of-custody ledger for physical assets.

    Each asset has one transaction tree rooted at index 0; each transaction
    carries an ordered list of stages. Nothing is ever updated or removed.

    Thread Safety:
        Operations on the same asset_id are linearizable (one lock per asset).
        Registration is serialized by a registry lock. The operation log has
        its own lock, always acquired after an asset lock.

    Example:
        ledger = ProvenanceLedger("supply")
        ledger.add_asset("A1", "Vaccine batch", "Pharma", "acme", "acme",
                         "2025-01-01", "2026-01-01", "vials", 10,
                         "US", "CA", "San Jose", 5000, "USD",
                         True, "FDA", "2025-01-02", True,
                         True, "2-8C", "40%", "Active", ["cold"], "")
        ledger.add_root_transaction("A1", "T0", "2025-01-03", "Created", "acme", "")
        ledger.add_child_transaction("A1", "T1", "2025-01-04", "Shipment", "carrier", "", 0)
        ledger.add_stage_to_transaction("A1", 1, 1, "Shipped", "Carrier1", "2025-01-04T10:00",
                                        "US", "CA", "Fresno", ["temp"], ["4C"])
        details = ledger.get_full_asset_details("A1")
    """

    def __init__(self, name: str, verbose: bool = True):
        """
        Create an empty ledger.

        Args:
            name: Ledger identifier
            verbose: Print a line for every applied or rejected write (default: True)
        """
        self.name = name
        self.verbose = verbose
        self._registry = AssetRegistry()
        self._transactions = TransactionLedger(self._registry)
        self._stages = StageRecorder(self._transactions)
        self._operation_log: List[Operation] = []
        self._registry_lock = threading.Lock()
        self._asset_locks: Dict[str, threading.Lock] = {}
        self._log_lock = threading.Lock()

    # ========================================================================
    # LOCKING AND AUDIT TRAIL
    # ========================================================================

    def _asset_lock(self, asset_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._asset_locks.get(asset_id)
        if lock is None:
            raise NotFound(f"Asset {asset_id} not registered")
        return lock

    @contextmanager
    def _writing(self, asset_id: str) -> Iterator[None]:
        """Hold the asset's lock for a write and report rejections."""
        try:
            with self._asset_lock(asset_id):
                yield
        except ProvenanceError as e:
            self._print_rejected(e)
            raise

    def _print_rejected(self, error: ProvenanceError) -> None:
        if self.verbose:
            print(f"✗ REJECTED: {type(error).__name__}: {error}")

    def _record(
        self,
        kind: OperationType,
        asset_id: str,
        payload,
        txn_index: Optional[int] = None,
    ) -> None:
        with self._log_lock:
            self._operation_log.append(Operation(
                sequence=len(self._operation_log),
                kind=kind,
                asset_id=asset_id,
                payload=payload,
                txn_index=txn_index,
            ))

    @property
    def operation_log(self) -> Tuple[Operation, ...]:
        """Every applied write, in the order it was applied."""
        with self._log_lock:
            return tuple(self._operation_log)

    # ========================================================================
    # ASSETS
    # ========================================================================

    def register_asset(self, asset: Asset) -> Asset:
        """
        Register a prebuilt Asset record.

        Returns:
            The stored record

        Raises:
            AlreadyExists: If asset.asset_id is already registered
        """
        with self._registry_lock:
            try:
                stored = self._registry.register(asset)
            except ProvenanceError as e:
                self._print_rejected(e)
                raise
            self._asset_locks[stored.asset_id] = threading.Lock()
            self._record(OperationType.ADD_ASSET, stored.asset_id, stored)
        if self.verbose:
            print(f"📝 Registered: {stored.asset_id} ({stored.asset_name}) [{stored.asset_type}]")
        return stored

    def add_asset(
        self,
        asset_id: str,
        asset_name: str,
        asset_type: str,
        created_by: str,
        current_owner: str,
        manufacture_date: str,
        expiry_date: str,
        unit: str,
        quantity: int,
        country: str,
        state: str,
        city: str,
        base_cost: int,
        currency: str,
        is_certified: bool,
        certification_body: str,
        inspection_date: str,
        is_tamper_evident: bool,
        requires_cold_chain: bool,
        temperature_range: str,
        humidity_level: str,
        status: str,
        tags: Sequence[str],
        additional_notes: str,
    ) -> Asset:
        """
        Register an asset from its individual fields.

        All fields are validated before anything is stored.
        tags may be any sequence of strings; it is stored, and returned by
        get_asset, as a tuple.

        Returns:
            The stored record

        Raises:
            AlreadyExists: If asset_id is already registered
            InvalidArgument: If quantity or base_cost is not a non-negative int,
                             asset_id is empty, or tags is a bare string
        """
        try:
            asset = Asset(
                asset_id=asset_id,
                asset_name=asset_name,
                asset_type=asset_type,
                created_by=created_by,
                current_owner=current_owner,
                manufacture_date=manufacture_date,
                expiry_date=expiry_date,
                unit=unit,
                quantity=quantity,
                origin=Location(country, state, city),
                cost=Cost(base_cost, currency),
                verification=Verification(
                    is_certified, certification_body, inspection_date, is_tamper_evident
                ),
                storage=StorageRequirements(requires_cold_chain, temperature_range, humidity_level),
                status=status,
                tags=tags,
                additional_notes=additional_notes,
            )
        except ProvenanceError as e:
            self._print_rejected(e)
            raise
        return self.register_asset(asset)

    def get_asset(self, asset_id: str) -> Asset:
        """
        Return a registered asset.

        Raises:
            NotFound: If asset_id is not registered
        """
        with self._asset_lock(asset_id):
            return self._registry.get(asset_id)

    def has_asset(self, asset_id: str) -> bool:
        with self._registry_lock:
            return self._registry.contains(asset_id)

    def list_assets(self) -> List[str]:
        """Registered asset ids, in registration order."""
        with self._registry_lock:
            return self._registry.list_ids()

    # ========================================================================
    # TRANSACTIONS
    # ========================================================================

    def add_root_transaction(
        self,
        asset_id: str,
        transaction_id: str,
        transaction_date: str,
        transaction_type: str,
        transaction_owner: str,
        transaction_notes: str,
    ) -> Transaction:
        """
        Record the root of an asset's transaction tree.

        Returns:
            The stored transaction (index 0)

        Raises:
            NotFound: If the asset is not registered
            AlreadyExists: If the asset already has a root transaction
        """
        with self._writing(asset_id):
            tx = self._transactions.append_root(
                asset_id, transaction_id, transaction_date,
                transaction_type, transaction_owner, transaction_notes,
            )
            self._record(OperationType.ADD_ROOT_TRANSACTION, asset_id, tx)
        if self.verbose:
            print(f"✓ ROOT   {asset_id}[{tx.index}] {tx.transaction_id} ({tx.transaction_type})")
        return tx

    def add_child_transaction(
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
        Record a transaction under an existing one.

        Returns:
            The stored transaction, at index equal to the previous count

        Raises:
            NotFound: If the asset is not registered
            InvalidReference: If parent_txn_index does not name an existing transaction
        """
        with self._writing(asset_id):
            tx = self._transactions.append_child(
                asset_id, transaction_id, transaction_date,
                transaction_type, transaction_owner, transaction_notes,
                parent_txn_index,
            )
            self._record(OperationType.ADD_CHILD_TRANSACTION, asset_id, tx)
        if self.verbose:
            print(f"✓ CHILD  {asset_id}[{tx.index}] ← [{tx.parent_txn_index}] "
                  f"{tx.transaction_id} ({tx.transaction_type})")
        return tx

    def get_transaction_count(self, asset_id: str) -> int:
        """
        Number of transactions recorded for an asset.

        Raises:
            NotFound: If the asset is not registered
        """
        with self._asset_lock(asset_id):
            return self._transactions.count(asset_id)

    def get_transaction_by_index(self, asset_id: str, index: int) -> Transaction:
        """
        Return one transaction together with its current stages.

        Raises:
            NotFound: If the asset is not registered
            OutOfRange: If index is not below the current count
        """
        with self._asset_lock(asset_id):
            return self._with_stages(asset_id, self._transactions.get_by_index(asset_id, index))

    def get_children(self, asset_id: str, index: int) -> Tuple[Transaction, ...]:
        """Direct children of a transaction, in index order, without stages."""
        with self._asset_lock(asset_id):
            return self._transactions.children(asset_id, index)

    def get_lineage(self, asset_id: str, index: int) -> Tuple[Transaction, ...]:
        """Path from the root down to a transaction, without stages."""
        with self._asset_lock(asset_id):
            return self._transactions.lineage(asset_id, index)

    def _with_stages(self, asset_id: str, tx: Transaction) -> Transaction:
        return replace(tx, stages=self._stages.stages(asset_id, tx.index))

    # ========================================================================
    # STAGES
    # ========================================================================

    def add_stage_to_transaction(
        self,
        asset_id: str,
        txn_index: int,
        stage_number: int,
        stage_name: str,
        sent_by: str,
        timestamp: str,
        country: str,
        state: str,
        city: str,
        keys: Sequence[str],
        values: Sequence[str],
    ) -> Stage:
        """
        Append a stage to an existing transaction.

        Returns:
            The stored stage

        Raises:
            NotFound: If the asset is not registered
            OutOfRange: If txn_index does not name an existing transaction
            InvalidArgument: If keys and values differ in length
        """
        with self._writing(asset_id):
            stage = self._stages.append_stage(
                asset_id, txn_index, stage_number, stage_name, sent_by, timestamp,
                country, state, city, keys, values,
            )
            self._record(OperationType.ADD_STAGE, asset_id, stage, txn_index=txn_index)
        if self.verbose:
            print(f"✓ STAGE  {asset_id}[{txn_index}] #{stage.stage_number} {stage.stage_name} "
                  f"({len(stage.attributes)} attributes)")
        return stage

    def get_stage_count(self, asset_id: str, txn_index: int) -> int:
        with self._asset_lock(asset_id):
            return self._stages.count(asset_id, txn_index)

    def get_stage(self, asset_id: str, txn_index: int, stage_index: int) -> Stage:
        """
        Return one stage by position.

        Raises:
            NotFound: If the asset is not registered
            OutOfRange: If txn_index or stage_index is beyond the current length
        """
        with self._asset_lock(asset_id):
            return self._stages.get(asset_id, txn_index, stage_index)

    # ========================================================================
    # FULL DETAILS
    # ========================================================================

    def get_full_asset_details(self, asset_id: str) -> AssetDetails:
        """
        Point-in-time export of an asset with its whole history.

        Returns:
            AssetDetails holding the asset and every transaction with its stages

        Raises:
            NotFound: If the asset is not registered
        """
        with self._asset_lock(asset_id):
            return AssetDetails(
                asset=self._registry.get(asset_id),
                transactions=tuple(
                    self._with_stages(asset_id, tx) for tx in self._transactions.all(asset_id)
                ),
            )

    def fingerprint(self, asset_id: str) -> str:
        """Content hash of an asset's full provenance."""
        return self.get_full_asset_details(asset_id).fingerprint

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def replay(self, upto: Optional[int] = None) -> ProvenanceLedger:
        """
        Create a new ledger by re-applying the operation log.

        Every logged write is re-validated, so the result is a ledger built
        through the public operations only.

        Args:
            upto: Replay only the first `upto` operations (default: all)

        Returns:
            New ProvenanceLedger instance with replayed state

        Raises:
            InvalidArgument: If upto is negative
            ProvenanceError: If a logged operation is rejected during replay
        """
        if upto is not None and upto < 0:
            raise InvalidArgument(f"upto must be non-negative, got {upto}")
        replayed = ProvenanceLedger(name=f"{self.name}_replayed", verbose=self.verbose)
        self._replay_into(replayed, self.operation_log[:upto])
        return replayed

    def clone(self) -> ProvenanceLedger:
        """
        Create an independent copy of this ledger under the same name.

        Writes to the clone do not affect this ledger, and vice versa.
        """
        cloned = ProvenanceLedger(name=self.name, verbose=False)
        self._replay_into(cloned, self.operation_log)
        cloned.verbose = self.verbose
        return cloned

    @staticmethod
    def _replay_into(target: ProvenanceLedger, operations: Sequence[Operation]) -> None:
        for op in operations:
            try:
                target._apply(op)
            except ProvenanceError as e:
                raise ProvenanceError(f"Replay failed at {op!r}: {e}") from e

    def _apply(self, op: Operation) -> None:
        payload = op.payload
        if op.kind is OperationType.ADD_ASSET:
            self.register_asset(payload)
        elif op.kind is OperationType.ADD_ROOT_TRANSACTION:
            self.add_root_transaction(
                op.asset_id, payload.transaction_id, payload.transaction_date,
                payload.transaction_type, payload.transaction_owner, payload.transaction_notes,
            )
        elif op.kind is OperationType.ADD_CHILD_TRANSACTION:
            self.add_child_transaction(
                op.asset_id, payload.transaction_id, payload.transaction_date,
                payload.transaction_type, payload.transaction_owner, payload.transaction_notes,
                payload.parent_txn_index,
            )
        elif op.kind is OperationType.ADD_STAGE:
            self.add_stage_to_transaction(
                op.asset_id, op.txn_index, payload.stage_number, payload.stage_name,
                payload.sent_by, payload.timestamp, payload.location.country,
                payload.location.state, payload.location.city, payload.keys, payload.values,
            )
        else:
            raise ProvenanceError(f"Unknown operation kind: {op.kind}")
