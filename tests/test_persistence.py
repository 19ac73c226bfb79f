from __future__ import annotations

import os
import tempfile
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from application.engine import FinanceEngine
from domain.defaults import default_snapshot
from domain.schemas import Transaction
from infrastructure.persistence.gateway import PersistenceError
from infrastructure.persistence.json_file_gateway import JsonFileGateway
from infrastructure.persistence.memory_gateway import InMemoryGateway


class JsonFileGatewayTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "nested" / "data.json"
        self.gateway = JsonFileGateway(self.path)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_load_missing_file_returns_none(self) -> None:
        self.assertIsNone(self.gateway.load())

    def test_save_then_load_is_deep_equal(self) -> None:
        snapshot = default_snapshot()
        snapshot.profile.monthly_change = Decimal("2.4") + Decimal("-78.52") / Decimal("16499.17") * 100
        snapshot.insights_refreshed_at = datetime(2026, 4, 20, 12, 0, tzinfo=timezone.utc)
        snapshot.transactions.insert(
            0, Transaction(id=6, date="Apr 16", payee="Bakery", category="Food", amount=Decimal("-3.10"))
        )

        self.gateway.save(snapshot)
        loaded = self.gateway.load()

        self.assertEqual(loaded, snapshot)

    def test_saved_document_uses_boundary_field_names(self) -> None:
        self.gateway.save(default_snapshot())
        text = self.path.read_text(encoding="utf-8")

        self.assertIn('"monthlyIncome"', text)
        self.assertIn('"chartData"', text)
        self.assertIn('"last3Months"', text)
        self.assertIn('"categoryMappings"', text)

    def test_save_leaves_no_temp_files(self) -> None:
        self.gateway.save(default_snapshot())
        self.gateway.save(default_snapshot())

        self.assertEqual(os.listdir(self.path.parent), ["data.json"])

    def test_corrupt_file_raises(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(PersistenceError):
            self.gateway.load()

    def test_non_utf8_file_raises(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_bytes(b"\xff\xfe\x00garbage")

        with self.assertRaises(PersistenceError):
            self.gateway.load()

    def test_engine_falls_back_to_defaults_on_non_utf8_file(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_bytes(b"\xff\xfe\x00garbage")

        snapshot = FinanceEngine(gateway=self.gateway).load()

        self.assertEqual(snapshot, default_snapshot())
        self.assertEqual(self.gateway.load(), default_snapshot())

    def test_unwritable_target_raises(self) -> None:
        blocker = Path(self._tmp.name) / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        gateway = JsonFileGateway(blocker / "data.json")

        with self.assertRaises(PersistenceError):
            gateway.save(default_snapshot())

    def test_path_from_environment(self) -> None:
        previous = os.environ.get("FINTRACK_DATA_PATH")
        os.environ["FINTRACK_DATA_PATH"] = str(self.path)
        try:
            self.assertEqual(JsonFileGateway().path, self.path)
        finally:
            if previous is None:
                os.environ.pop("FINTRACK_DATA_PATH", None)
            else:
                os.environ["FINTRACK_DATA_PATH"] = previous


class InMemoryGatewayTests(unittest.TestCase):
    def test_round_trip_returns_independent_copy(self) -> None:
        gateway = InMemoryGateway()
        snapshot = default_snapshot()

        gateway.save(snapshot)
        loaded = gateway.load()
        loaded.profile.balance = Decimal("1")

        self.assertEqual(gateway.load(), snapshot)
        self.assertIsNot(loaded, snapshot)

    def test_empty_store_returns_none(self) -> None:
        gateway = InMemoryGateway()
        self.assertIsNone(gateway.load())

        gateway.save(default_snapshot())
        gateway.clear()
        self.assertIsNone(gateway.load())


if __name__ == "__main__":
    unittest.main()
