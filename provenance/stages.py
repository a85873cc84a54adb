"""
stages.py - Stage recording

StageRecorder owns, for every transaction, an append-only list of Stage
records kept in call order.
"""

from __future__ import annotations
from typing import Dict, List, Sequence, Tuple

from .core import Stage, Location, OutOfRange
from .transactions import TransactionLedger


class StageRecorder:
    """
    Append-only stage sequences keyed by (asset_id, transaction index).

    Not thread-safe. ProvenanceLedger serializes access.
    """

    def __init__(self, transactions: TransactionLedger):
        self._transactions = transactions
        self._stages: Dict[Tuple[str, int], List[Stage]] = {}

    def append_stage(
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

        stage_number is stored as given; duplicates and gaps are accepted.

        Returns:
            The stored stage

        Raises:
            NotFound: If the asset is not registered
            OutOfRange: If txn_index does not name an existing transaction
            InvalidArgument: If keys and values differ in length
        """
        self._transactions.require_index(asset_id, txn_index)
        stage = Stage.from_keys_values(
            stage_number=stage_number,
            stage_name=stage_name,
            sent_by=sent_by,
            timestamp=timestamp,
            location=Location(country, state, city),
            keys=keys,
            values=values,
        )
        self._stages.setdefault((asset_id, txn_index), []).append(stage)
        return stage

    def stages(self, asset_id: str, txn_index: int) -> Tuple[Stage, ...]:
        self._transactions.require_index(asset_id, txn_index)
        return tuple(self._stages.get((asset_id, txn_index), ()))

    def count(self, asset_id: str, txn_index: int) -> int:
        self._transactions.require_index(asset_id, txn_index)
        return len(self._stages.get((asset_id, txn_index), ()))

    def get(self, asset_id: str, txn_index: int, stage_index: int) -> Stage:
        """
        Return one stage by its position within the transaction.

        Raises:
            NotFound: If the asset is not registered
            OutOfRange: If txn_index or stage_index is beyond the current length
        """
        recorded = self.stages(asset_id, txn_index)
        if isinstance(stage_index, bool) or not isinstance(stage_index, int) \
                or not 0 <= stage_index < len(recorded):
            raise OutOfRange(
                f"Asset {asset_id} transaction {txn_index}: stage index {stage_index!r} "
                f"out of range ({len(recorded)} stages)"
            )
        return recorded[stage_index]
