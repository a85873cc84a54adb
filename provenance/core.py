"""
Core types and pure functions for the provenance ledger.

This module provides the foundational data structures for the ledger:
1. Immutable records: Asset (with its value parts), Transaction, Stage
2. Snapshots and audit entries: AssetDetails, Operation
3. Exceptions: ProvenanceError and its specific error types
4. Canonical serialization and content hashing for snapshots

All records are frozen. Sequences are stored as tuples so that a record handed
to a caller can never be used to mutate ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
import hashlib
from typing import Any, Optional, Sequence, Tuple


# ============================================================================
# CONSTANTS
# ============================================================================

# Position of the root transaction in every asset's transaction sequence.
ROOT_TXN_INDEX = 0

# Parent index recorded on the root transaction. The root refers to itself,
# which is unambiguous because position 0 is always the root.
ROOT_PARENT_INDEX = 0


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ProvenanceError(Exception):
    """Base exception for all provenance ledger errors."""
    pass


class NotFound(ProvenanceError):
    """Raised when the referenced asset has not been registered."""
    pass


class AlreadyExists(ProvenanceError):
    """Raised on a duplicate asset_id or a second root transaction for an asset."""
    pass


class InvalidReference(ProvenanceError):
    """Raised when a child transaction names a parent index that does not exist yet."""
    pass


class OutOfRange(ProvenanceError):
    """Raised when a transaction or stage index is beyond the current sequence length."""
    pass


class InvalidArgument(ProvenanceError):
    """Raised when field values are malformed (e.g. key/value length mismatch)."""
    pass


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def _require_non_negative_int(name: str, value: Any) -> None:
    # bool is an int subclass; True must not pass as a quantity of 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise InvalidArgument(f"{name} must be non-negative, got {value}")


def _as_string_tuple(name: str, values: Sequence[str]) -> Tuple[str, ...]:
    """Copy a caller-supplied string sequence into a tuple."""
    if isinstance(values, (str, bytes)):
        raise InvalidArgument(f"{name} must be a sequence of strings, not a bare string")
    try:
        return tuple(values)
    except TypeError:
        raise InvalidArgument(f"{name} must be a sequence, got {type(values).__name__}") from None


# ============================================================================
# ASSET
# ============================================================================

@dataclass(frozen=True, slots=True)
class Location:
    """Geographic place: used for an asset's origin and a stage's location."""
    country: str
    state: str
    city: str

    def __repr__(self) -> str:
        return f"{self.city}, {self.state}, {self.country}"


@dataclass(frozen=True, slots=True)
class Cost:
    """Base cost of an asset in minor units of its currency."""
    base_cost: int
    currency: str

    def __post_init__(self):
        _require_non_negative_int("base_cost", self.base_cost)


@dataclass(frozen=True, slots=True)
class Verification:
    """Certification and inspection status of an asset."""
    is_certified: bool
    certification_body: str
    inspection_date: str
    is_tamper_evident: bool


@dataclass(frozen=True, slots=True)
class StorageRequirements:
    """Handling conditions the asset needs while in custody."""
    requires_cold_chain: bool
    temperature_range: str
    humidity_level: str


@dataclass(frozen=True, slots=True)
class Asset:
    """
    A tracked physical item or batch.

    Created once by registration and never updated or removed afterwards.

    Attributes:
        asset_id: Unique key for the registry's lifetime (non-empty).
        asset_name: Human-readable name.
        asset_type: Category of the asset (free text).
        created_by: Party that registered the asset.
        current_owner: Owner at registration time.
        manufacture_date: Manufacture date as supplied by the caller.
        expiry_date: Expiry date as supplied by the caller.
        unit: Unit of measure for quantity (e.g. "kg", "pallets").
        quantity: Non-negative integer quantity.
        origin: Country/state/city of origin.
        cost: Base cost and currency.
        verification: Certification and tamper-evidence details.
        storage: Cold-chain, temperature and humidity requirements.
        status: Status label at registration time.
        tags: Ordered tags.
        additional_notes: Free-text notes.
        exists: Existence flag; always True for a registered asset.
    """
    asset_id: str
    asset_name: str
    asset_type: str
    created_by: str
    current_owner: str
    manufacture_date: str
    expiry_date: str
    unit: str
    quantity: int
    origin: Location
    cost: Cost
    verification: Verification
    storage: StorageRequirements
    status: str
    tags: Tuple[str, ...] = ()
    additional_notes: str = ""
    exists: bool = True

    def __post_init__(self):
        if not isinstance(self.asset_id, str) or not self.asset_id:
            raise InvalidArgument("asset_id cannot be empty")
        _require_non_negative_int("quantity", self.quantity)
        object.__setattr__(self, 'tags', _as_string_tuple("tags", self.tags))

    def __repr__(self) -> str:
        return f"Asset({self.asset_id}: {self.asset_name} x{self.quantity} {self.unit}, owner={self.current_owner})"


# ============================================================================
# STAGE
# ============================================================================

@dataclass(frozen=True, slots=True)
class Stage:
    """
    A sub-event within a transaction carrying free-form attributes.

    stage_number is caller metadata. It is never checked for uniqueness or
    ordering; the position of the stage within its transaction is the order.

    Attributes:
        stage_number: Opaque caller-supplied number.
        stage_name: Name of the stage (e.g. "Shipped").
        sent_by: Party that reported the stage.
        timestamp: Time of the stage as supplied by the caller.
        location: Where the stage happened.
        attributes: Ordered (key, value) pairs; keys may repeat.
    """
    stage_number: int
    stage_name: str
    sent_by: str
    timestamp: str
    location: Location
    attributes: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def from_keys_values(
        cls,
        stage_number: int,
        stage_name: str,
        sent_by: str,
        timestamp: str,
        location: Location,
        keys: Sequence[str],
        values: Sequence[str],
    ) -> Stage:
        """
        Build a Stage from parallel key and value sequences.

        Raises:
            InvalidArgument: If the sequences differ in length or either is a bare string
        """
        key_tuple = _as_string_tuple("keys", keys)
        value_tuple = _as_string_tuple("values", values)
        if len(key_tuple) != len(value_tuple):
            raise InvalidArgument(
                f"keys and values must have equal length, got {len(key_tuple)} and {len(value_tuple)}"
            )
        return cls(
            stage_number=stage_number,
            stage_name=stage_name,
            sent_by=sent_by,
            timestamp=timestamp,
            location=location,
            attributes=tuple(zip(key_tuple, value_tuple)),
        )

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(k for k, _ in self.attributes)

    @property
    def values(self) -> Tuple[str, ...]:
        return tuple(v for _, v in self.attributes)

    def __repr__(self) -> str:
        attrs = ", ".join(f"{k}={v}" for k, v in self.attributes)
        return f"Stage(#{self.stage_number} {self.stage_name} by {self.sent_by} [{attrs}])"


# ============================================================================
# TRANSACTION
# ============================================================================

@dataclass(frozen=True, slots=True)
class Transaction:
    """
    A custody/event record; one node in an asset's transaction tree.

    Attributes:
        index: Stable position in the owning asset's sequence.
        transaction_id: Caller-supplied identifier.
        transaction_date: Date as supplied by the caller.
        transaction_type: Kind of event (e.g. "Transfer", "Shipment").
        transaction_owner: Party holding custody after this event.
        transaction_notes: Free-text notes.
        parent_txn_index: Position of the parent; ROOT_PARENT_INDEX on the root.
        stages: Stages recorded against this transaction, in call order.
    """
    index: int
    transaction_id: str
    transaction_date: str
    transaction_type: str
    transaction_owner: str
    transaction_notes: str
    parent_txn_index: int
    stages: Tuple[Stage, ...] = ()

    def __post_init__(self):
        if self.index != ROOT_TXN_INDEX and not 0 <= self.parent_txn_index < self.index:
            raise InvalidReference(
                f"Transaction {self.index} cannot have parent {self.parent_txn_index}"
            )

    @property
    def is_root(self) -> bool:
        return self.index == ROOT_TXN_INDEX

    @property
    def parent(self) -> Optional[int]:
        """Parent position, or None for the root."""
        return None if self.is_root else self.parent_txn_index

    def __repr__(self) -> str:
        parent = "root" if self.is_root else f"parent={self.parent_txn_index}"
        return (
            f"Transaction([{self.index}] {self.transaction_id} {self.transaction_type} "
            f"owner={self.transaction_owner}, {parent}, {len(self.stages)} stages)"
        )


# ============================================================================
# SNAPSHOTS AND AUDIT LOG
# ============================================================================

def _canonicalize(value: Any) -> str:
    """
    Produce a canonical string representation of a value for hashing.

    Dataclasses are serialized field by field in declaration order, so two
    snapshots with equal content always produce the same string.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"N:{value}"
    if isinstance(value, str):
        return f"S:{len(value)}:{value}"
    if isinstance(value, Enum):
        return f"E:{value.value}"
    if is_dataclass(value) and not isinstance(value, type):
        serialized = ",".join(
            f"{f.name}={_canonicalize(getattr(value, f.name))}" for f in fields(value)
        )
        return f"{type(value).__name__}{{{serialized}}}"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        serialized = ",".join(f"{_canonicalize(k)}:{_canonicalize(v)}" for k, v in items)
        return f"{{{serialized}}}"
    if isinstance(value, (list, tuple)):
        serialized = ",".join(_canonicalize(item) for item in value)
        return f"[{serialized}]"
    return f"R:{repr(value)}"


@dataclass(frozen=True, slots=True)
class AssetDetails:
    """
    Point-in-time provenance export of one asset.

    Attributes:
        asset: The registered asset record.
        transactions: The full transaction sequence, each with its stages.
    """
    asset: Asset
    transactions: Tuple[Transaction, ...]

    @property
    def fingerprint(self) -> str:
        """Content hash of the snapshot; equal content gives an equal fingerprint."""
        return hashlib.sha256(_canonicalize(self).encode()).hexdigest()

    def __repr__(self) -> str:
        w = 100  # Inner content width
        bar = "─" * w

        def pad(text: str) -> str:
            """Pad or truncate text to exactly w characters."""
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        a = self.asset
        lines = [
            "",
            f"┌{bar}┐",
            f"│{pad(' Asset: ' + a.asset_id + ' (' + a.asset_name + ')')}│",
            f"├{bar}┤",
            f"│{pad('   type           : ' + a.asset_type)}│",
            f"│{pad('   owner          : ' + a.current_owner)}│",
            f"│{pad('   quantity       : ' + str(a.quantity) + ' ' + a.unit)}│",
            f"│{pad('   origin         : ' + repr(a.origin))}│",
            f"│{pad('   status         : ' + a.status)}│",
            f"│{pad('   tags           : ' + ', '.join(a.tags))}│",
            f"├{bar}┤",
            f"│{pad(' Transactions (' + str(len(self.transactions)) + '):')}│",
        ]
        for tx in self.transactions:
            parent = "root" if tx.is_root else f"← [{tx.parent_txn_index}]"
            lines.append(
                f"│{pad(f'   [{tx.index}] {tx.transaction_id} {tx.transaction_type} ({tx.transaction_owner}) {parent}')}│"
            )
            for stage in tx.stages:
                attrs = ", ".join(f"{k}={v}" for k, v in stage.attributes)
                lines.append(f"│{pad(f'       #{stage.stage_number} {stage.stage_name}: {attrs}')}│")
        lines.append(f"└{bar}┘")
        return "\n".join(lines)


class OperationType(Enum):
    """Kind of write recorded in the operation log."""
    ADD_ASSET = "add_asset"
    ADD_ROOT_TRANSACTION = "add_root_transaction"
    ADD_CHILD_TRANSACTION = "add_child_transaction"
    ADD_STAGE = "add_stage"


@dataclass(frozen=True, slots=True)
class Operation:
    """
    One applied write in the ledger's operation log.

    Attributes:
        sequence: Monotonic position in the log.
        kind: Which operation was applied.
        asset_id: The asset the write belongs to.
        payload: The stored record (Asset, Transaction or Stage).
        txn_index: Target transaction for ADD_STAGE, else None.
    """
    sequence: int
    kind: OperationType
    asset_id: str
    payload: Any
    txn_index: Optional[int] = None

    def __repr__(self) -> str:
        target = f"[{self.txn_index}]" if self.txn_index is not None else ""
        return f"Operation({self.sequence}: {self.kind.value} {self.asset_id}{target})"
