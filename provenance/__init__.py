"""
provenance - Supply-Chain Provenance Ledger

Records a physical asset once, then accumulates its chain of custody as an
append-only tree of transactions, each carrying ordered stages with
key/value attributes.

Usage:
    from provenance import ProvenanceLedger

    ledger = ProvenanceLedger("supply", verbose=False)
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

# Core types
from .core import (
    Asset,
    Location,
    Cost,
    Verification,
    StorageRequirements,
    Transaction,
    Stage,
    AssetDetails,
    Operation,
    OperationType,
    ProvenanceError,
    NotFound,
    AlreadyExists,
    InvalidReference,
    OutOfRange,
    InvalidArgument,
    ROOT_TXN_INDEX,
    ROOT_PARENT_INDEX,
)

# Stores
from .registry import AssetRegistry
from .transactions import TransactionLedger
from .stages import StageRecorder

# Ledger
from .ledger import ProvenanceLedger


__all__ = [
    # Core
    'Asset', 'Location', 'Cost', 'Verification', 'StorageRequirements',
    'Transaction', 'Stage', 'AssetDetails', 'Operation', 'OperationType',
    'ROOT_TXN_INDEX', 'ROOT_PARENT_INDEX',
    # Exceptions
    'ProvenanceError', 'NotFound', 'AlreadyExists', 'InvalidReference',
    'OutOfRange', 'InvalidArgument',
    # Stores
    'AssetRegistry', 'TransactionLedger', 'StageRecorder',
    # Ledger
    'ProvenanceLedger',
]
