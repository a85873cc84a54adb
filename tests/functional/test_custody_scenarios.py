"""
test_custody_scenarios.py - End-to-end chain-of-custody scenarios

Tests:
- The reference single-asset flow (register, root, child, stage, export)
- A branching cold-chain shipment with several stages per leg
- Several assets tracked side by side
"""

from provenance import ProvenanceLedger, AssetDetails
from tests.builders import asset_fields


class TestReferenceFlow:

    def test_register_root_child_stage_export(self):
        ledger = ProvenanceLedger("supply", verbose=False)
        ledger.add_asset(**asset_fields("A1", quantity=10))

        ledger.add_root_transaction("A1", "T0", "2025-01-03", "Created", "acme_pharma", "")
        ledger.add_child_transaction("A1", "T1", "2025-01-04", "Shipment", "carrier", "", 0)

        assert ledger.get_transaction_count("A1") == 2
        assert ledger.get_transaction_by_index("A1", 1).parent_txn_index == 0

        ledger.add_stage_to_transaction(
            "A1", 1, 1, "Shipped", "Carrier1", "2025-01-04T10:00",
            "US", "CA", "Fresno", ["temp"], ["4C"],
        )

        details = ledger.get_full_asset_details("A1")
        assert isinstance(details, AssetDetails)
        assert details.asset.quantity == 10
        assert [tx.transaction_id for tx in details.transactions] == ["T0", "T1"]
        assert details.transactions[0].stages == ()
        assert len(details.transactions[1].stages) == 1
        stage = details.transactions[1].stages[0]
        assert stage.stage_name == "Shipped"
        assert stage.sent_by == "Carrier1"
        assert stage.attributes == (("temp", "4C"),)


class TestColdChainShipment:

    def test_split_shipment(self):
        """
        A batch is produced, split across two distributors, and one leg is
        forwarded to a pharmacy:

            [0] PRODUCED (manufacturer)
             ├── [1] SOLD (distributor_east)
             │    └── [3] DELIVERED (pharmacy)
             └── [2] SOLD (distributor_west)
        """
        ledger = ProvenanceLedger("cold_chain", verbose=False)
        ledger.add_asset(**asset_fields("LOT-7", asset_name="Insulin", quantity=500))

        ledger.add_root_transaction("LOT-7", "P-1", "2025-02-01", "PRODUCED", "manufacturer", "")
        ledger.add_child_transaction("LOT-7", "S-1", "2025-02-03", "SOLD", "distributor_east", "300 units", 0)
        ledger.add_child_transaction("LOT-7", "S-2", "2025-02-03", "SOLD", "distributor_west", "200 units", 0)
        ledger.add_child_transaction("LOT-7", "D-1", "2025-02-05", "DELIVERED", "pharmacy", "", 1)

        for n, (city, temp) in enumerate([("Newark", "3C"), ("Philadelphia", "4C"), ("Baltimore", "5C")], start=1):
            ledger.add_stage_to_transaction(
                "LOT-7", 1, n, "In transit", "reefer_truck", f"2025-02-0{n + 2}T06:00",
                "US", "NJ", city, ["temp", "door"], [temp, "closed"],
            )

        history = ledger.get_full_asset_details("LOT-7")
        assert [tx.transaction_owner for tx in history.transactions] == [
            "manufacturer", "distributor_east", "distributor_west", "pharmacy",
        ]
        assert [s.location.city for s in history.transactions[1].stages] == ["Newark", "Philadelphia", "Baltimore"]
        assert [tx.transaction_id for tx in ledger.get_lineage("LOT-7", 3)] == ["P-1", "S-1", "D-1"]
        assert [tx.transaction_id for tx in ledger.get_children("LOT-7", 0)] == ["S-1", "S-2"]

        report = repr(history)
        assert "LOT-7" in report
        assert "temp=5C" in report


class TestManyAssets:

    def test_assets_do_not_share_history(self):
        ledger = ProvenanceLedger("warehouse", verbose=False)
        for asset_id in ["PAL-1", "PAL-2"]:
            ledger.add_asset(**asset_fields(asset_id))
            ledger.add_root_transaction(asset_id, f"{asset_id}-in", "2025-04-01", "RECEIVED", "warehouse", "")

        ledger.add_child_transaction("PAL-1", "PAL-1-out", "2025-04-02", "SHIPPED", "retailer", "", 0)

        assert ledger.get_transaction_count("PAL-1") == 2
        assert ledger.get_transaction_count("PAL-2") == 1
        assert ledger.fingerprint("PAL-1") != ledger.fingerprint("PAL-2")
