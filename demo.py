#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Tracking an Asset's Chain of Custody

A step-by-step walk through the provenance ledger. Each step builds on the
previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3: Foundation     - The empty ledger, registering an asset, the root
  4-6: Custody tree   - Child transactions, stages, rejected writes
  7-8: Audit          - Full provenance export, operation log and replay

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from provenance import ProvenanceLedger, ProvenanceError


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    asset_id: str = "LOT-2025-001"
    asset_name: str = "mRNA vaccine batch"
    quantity: int = 1200
    unit: str = "vials"
    manufacturer: str = "acme_pharma"
    distributor: str = "northeast_distribution"
    pharmacy: str = "city_pharmacy"


CONFIG = DemoConfig()

# Global state for interactive mode
QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_empty_ledger() -> ProvenanceLedger:
    step_header(1, "The Empty Ledger",
        "Understand that a provenance ledger starts with no assets and no history.")

    print(">>> ledger = ProvenanceLedger('tutorial', verbose=True)")
    ledger = ProvenanceLedger("tutorial", verbose=True)

    section_header("Initial State")
    print(f"Ledger name:     {ledger.name}")
    print(f"Assets:          {ledger.list_assets()}")
    print(f"Operation log:   {len(ledger.operation_log)} entries")
    return ledger


def step_02_register_asset(ledger: ProvenanceLedger) -> None:
    step_header(2, "Registering an Asset",
        "An asset's identity and attributes are written once and never change.")

    ledger.add_asset(
        CONFIG.asset_id, CONFIG.asset_name, "Pharmaceutical",
        CONFIG.manufacturer, CONFIG.manufacturer,
        "2025-01-10", "2025-07-10", CONFIG.unit, CONFIG.quantity,
        "US", "MA", "Cambridge", 1_850_000, "USD",
        True, "FDA", "2025-01-11", True,
        True, "-25C to -15C", "n/a", "Released",
        ["cold-chain", "controlled"], "Keep frozen until dispensed",
    )

    asset = ledger.get_asset(CONFIG.asset_id)
    section_header("Stored Record")
    print(f"  {asset!r}")
    print(f"  origin:  {asset.origin!r}")
    print(f"  storage: cold chain={asset.storage.requires_cold_chain}, {asset.storage.temperature_range}")


def step_03_root_transaction(ledger: ProvenanceLedger) -> None:
    step_header(3, "The Root Transaction",
        "Every history starts with exactly one root at index 0.")

    ledger.add_root_transaction(
        CONFIG.asset_id, "MFG-0001", "2025-01-10", "MANUFACTURED", CONFIG.manufacturer, "Line 3",
    )
    section_header("A second root is refused")
    try:
        ledger.add_root_transaction(
            CONFIG.asset_id, "MFG-0002", "2025-01-10", "MANUFACTURED", CONFIG.manufacturer, "",
        )
    except ProvenanceError as e:
        print(f"  caught {type(e).__name__}")


# ============================================================================
# PHASE 2: CUSTODY TREE (Steps 4-6)
# ============================================================================

def step_04_child_transactions(ledger: ProvenanceLedger) -> None:
    step_header(4, "Growing the Tree",
        "Children reference any existing transaction by index; indices only grow.")

    ledger.add_child_transaction(
        CONFIG.asset_id, "SHP-0100", "2025-01-12", "SHIPPED", CONFIG.distributor, "", 0,
    )
    ledger.add_child_transaction(
        CONFIG.asset_id, "QA-0007", "2025-01-12", "SAMPLED", "qa_lab", "3 vials retained", 0,
    )
    ledger.add_child_transaction(
        CONFIG.asset_id, "DLV-0420", "2025-01-14", "DELIVERED", CONFIG.pharmacy, "", 1,
    )
    lineage = ledger.get_lineage(CONFIG.asset_id, 3)
    print(f"\n  lineage of [3]: {' -> '.join(tx.transaction_id for tx in lineage)}")


def step_05_stages(ledger: ProvenanceLedger) -> None:
    step_header(5, "Recording Stages",
        "Stages are ordered sub-events with free-form key/value attributes.")

    readings = [("Boston", "-21C"), ("Worcester", "-20C"), ("Springfield", "-22C")]
    for n, (city, temp) in enumerate(readings, start=1):
        ledger.add_stage_to_transaction(
            CONFIG.asset_id, 1, n, "In transit", "reefer_truck_12", f"2025-01-13T0{n}:00",
            "US", "MA", city, ["temp", "door"], [temp, "sealed"],
        )


def step_06_rejections(ledger: ProvenanceLedger) -> None:
    step_header(6, "Rejected Writes",
        "A failing write aborts entirely; nothing is half-recorded.")

    before = len(ledger.operation_log)
    attempts = [
        ("parent that does not exist yet",
         lambda: ledger.add_child_transaction(CONFIG.asset_id, "X", "", "", "", "", 99)),
        ("stage on a missing transaction",
         lambda: ledger.add_stage_to_transaction(CONFIG.asset_id, 42, 1, "", "", "", "", "", "", [], [])),
        ("mismatched keys and values",
         lambda: ledger.add_stage_to_transaction(CONFIG.asset_id, 1, 4, "", "", "", "", "", "", ["a", "b"], ["1"])),
        ("unknown asset",
         lambda: ledger.get_full_asset_details("LOT-UNKNOWN")),
    ]
    for label, attempt in attempts:
        section_header(label)
        try:
            attempt()
        except ProvenanceError:
            pass
    print(f"\n  operation log unchanged: {before} == {len(ledger.operation_log)}")


# ============================================================================
# PHASE 3: AUDIT (Steps 7-8)
# ============================================================================

def step_07_full_details(ledger: ProvenanceLedger) -> None:
    step_header(7, "Full Provenance Export",
        "One consistent snapshot of the asset and its whole history.")

    details = ledger.get_full_asset_details(CONFIG.asset_id)
    print(repr(details))
    print(f"\n  fingerprint: {details.fingerprint}")


def step_08_replay(ledger: ProvenanceLedger) -> None:
    step_header(8, "Operation Log and Replay",
        "The log of applied writes rebuilds identical state.")

    for op in ledger.operation_log:
        print(f"  {op!r}")
    ledger.verbose = False
    replayed = ledger.replay()
    same = replayed.fingerprint(CONFIG.asset_id) == ledger.fingerprint(CONFIG.asset_id)
    print(f"\n  replayed fingerprint matches: {same}")


def main():
    print("=" * 70)
    print("       PROVENANCE LEDGER TUTORIAL")
    print("=" * 70)

    ledger = step_01_empty_ledger()
    wait_for_enter()

    step_02_register_asset(ledger)
    wait_for_enter()

    step_03_root_transaction(ledger)
    wait_for_enter()

    step_04_child_transactions(ledger)
    wait_for_enter()

    step_05_stages(ledger)
    wait_for_enter()

    step_06_rejections(ledger)
    wait_for_enter()

    step_07_full_details(ledger)
    wait_for_enter()

    step_08_replay(ledger)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - See provenance/ledger.py for the full operation surface
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
