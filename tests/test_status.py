from __future__ import annotations

import unittest

from models import StatusCategory
from status import (
    can_activate_hedging,
    classify_status,
    has_started,
    is_finished,
    is_halftime_or_later,
    match_status,
    status_message,
)
from stubs import make_snapshot


class StatusTests(unittest.TestCase):
    def test_classify(self) -> None:
        self.assertEqual(classify_status("NS"), StatusCategory.NOT_STARTED)
        self.assertEqual(classify_status("2H"), StatusCategory.LIVE)
        self.assertEqual(classify_status("ht"), StatusCategory.HALFTIME)
        self.assertEqual(classify_status("AET"), StatusCategory.FINISHED)
        self.assertEqual(classify_status("SUSP"), StatusCategory.SUSPENDED)
        self.assertEqual(classify_status("PST"), StatusCategory.POSTPONED)

    def test_unknown_code_is_not_started(self) -> None:
        self.assertEqual(classify_status("XYZ"), StatusCategory.NOT_STARTED)
        self.assertEqual(classify_status(None), StatusCategory.NOT_STARTED)
        self.assertFalse(has_started("XYZ"))

    def test_predicates(self) -> None:
        self.assertTrue(has_started("1H"))
        self.assertTrue(has_started("FT"))
        self.assertFalse(has_started("NS"))
        self.assertFalse(has_started("SUSP"))

        self.assertTrue(is_halftime_or_later("HT"))
        self.assertTrue(is_halftime_or_later("2H"))
        self.assertTrue(is_halftime_or_later("PEN"))
        self.assertFalse(is_halftime_or_later("1H"))

        self.assertTrue(is_finished("FT"))
        self.assertFalse(is_finished("2H"))

    def test_hedging_window(self) -> None:
        self.assertTrue(can_activate_hedging("1H", 40))
        self.assertFalse(can_activate_hedging("1H", 39))
        self.assertTrue(can_activate_hedging("HT", None))
        self.assertTrue(can_activate_hedging("2H", None))
        self.assertTrue(can_activate_hedging("ET", 100))
        self.assertFalse(can_activate_hedging("NS", 0))
        self.assertFalse(can_activate_hedging("FT", 90))
        self.assertFalse(can_activate_hedging("SUSP", 60))

    def test_message_before_kickoff(self) -> None:
        message = status_message("NS", None)

        self.assertTrue(message.startswith("🔴 Le match n'a pas encore commencé."))
        self.assertIn("40ème minute", message)

    def test_message_when_finished(self) -> None:
        self.assertEqual(status_message("FT", 90), "⚫ Le match est terminé.")

    def test_message_counts_down_to_hedging_window(self) -> None:
        self.assertEqual(
            status_message("1H", 25),
            "🟡 Match en cours (25'). La stratégie de couverture sera disponible dans ~15 min.",
        )
        self.assertIn("~40 min", status_message("1H", None))

    def test_message_when_hedging_open(self) -> None:
        self.assertEqual(status_message("1H", 40), "🟢 La stratégie de couverture est disponible!")
        self.assertEqual(status_message("HT", 45), "🟢 La stratégie de couverture est disponible!")

    def test_match_status_summary(self) -> None:
        summary = match_status(make_snapshot(1, 0, status="HT", elapsed=45))

        self.assertEqual(summary["category"], "halftime")
        self.assertTrue(summary["has_started"])
        self.assertTrue(summary["is_halftime_or_later"])
        self.assertFalse(summary["is_finished"])
        self.assertTrue(summary["can_hedge"])
        self.assertEqual(summary["teams"], {"home": "Paris Saint Germain", "away": "Lyon"})
        self.assertEqual(summary["score"]["home"], 1)
        self.assertEqual(summary["message"], "🟢 La stratégie de couverture est disponible!")


if __name__ == "__main__":
    unittest.main()
