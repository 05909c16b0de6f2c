from __future__ import annotations

import unittest

from models import (
    BetStatus,
    Confidence,
    OddsSource,
    OptionEvaluation,
    SuggestedStake,
    Trend,
    VerdictStatus,
)
from stubs import StubClient, make_snapshot
from tracker import (
    NO_OPTIONS_MESSAGE,
    evaluate_option,
    get_full_live_tracking,
    global_verdict,
    held_option,
    odds_change,
)


def _evaluation(status: BetStatus, probability: int = 50) -> OptionEvaluation:
    option = held_option("Victoire PSG", 2.0, 10)
    return OptionEvaluation(
        option=option,
        current_odds=2.0,
        odds_source=OddsSource.SIMULATED,
        odds_change=odds_change(2.0, 2.0),
        dynamic_probability=probability,
        probability_trend=Trend.STABLE,
        probability_confidence=Confidence.MEDIUM,
        current_status=status,
        static_probability=probability,
        suggested_stake=SuggestedStake(stake=0, kelly_pct=0.0, potential_return=0, potential_profit=0),
        potential_profit=10.0,
        current_profit=0.0,
    )


class OddsChangeTests(unittest.TestCase):
    def test_drift(self) -> None:
        change = odds_change(2.10, 1.01)

        self.assertEqual(change.diff, -1.09)
        self.assertEqual(change.pct_change, -51.9)
        self.assertEqual(change.direction, Trend.DOWN)
        self.assertTrue(change.is_significant)

    def test_small_move_is_not_significant(self) -> None:
        change = odds_change(2.00, 2.04)

        self.assertEqual(change.direction, Trend.UP)
        self.assertFalse(change.is_significant)


class EvaluateOptionTests(unittest.TestCase):
    def test_winning_home_bet_with_simulated_odds(self) -> None:
        snapshot = make_snapshot(2, 1, status="2H", elapsed=75)

        ev = evaluate_option(held_option("Victoire PSG", 2.10, 100), snapshot)

        self.assertEqual(ev.current_status, BetStatus.WINNING)
        self.assertEqual(ev.current_odds, 1.01)
        self.assertEqual(ev.odds_source, OddsSource.SIMULATED)
        self.assertEqual(ev.static_probability, 70)
        self.assertEqual(ev.potential_profit, 110.0)
        self.assertEqual(ev.current_profit, 0.0)
        # no edge at the floor price
        self.assertEqual(ev.suggested_stake.stake, 0)

    def test_won_bet_is_certain(self) -> None:
        snapshot = make_snapshot(2, 1, status="2H", elapsed=75)

        ev = evaluate_option(held_option("Plus de 2.5 buts", 1.80, 50), snapshot)

        self.assertEqual(ev.current_status, BetStatus.WON)
        self.assertEqual(ev.dynamic_probability, 100)
        self.assertEqual(ev.current_profit, 40.0)

    def test_lost_bet(self) -> None:
        snapshot = make_snapshot(0, 2, status="FT", elapsed=90)

        ev = evaluate_option(held_option("Victoire PSG", 1.90, 100), snapshot)

        self.assertEqual(ev.current_status, BetStatus.LOST)
        self.assertEqual(ev.dynamic_probability, 0)
        self.assertEqual(ev.current_profit, -100.0)

    def test_live_odds_used_when_present(self) -> None:
        snapshot = make_snapshot(0, 0, status="1H", elapsed=20)

        ev = evaluate_option(held_option("Match nul", 3.30, 40), snapshot, {"Draw": 2.9})

        self.assertEqual(ev.current_odds, 2.9)
        self.assertEqual(ev.odds_source, OddsSource.LIVE)

    def test_stake_respects_cap(self) -> None:
        snapshot = make_snapshot(0, 0, status="1H", elapsed=10)

        ev = evaluate_option(
            held_option("Double chance 1X", 1.35, 100), snapshot, {"1X": 3.0}, capital=5000, kelly_cap=0.02
        )

        self.assertLessEqual(ev.suggested_stake.stake, 100)


class GlobalVerdictTests(unittest.TestCase):
    def test_all_won(self) -> None:
        verdict = global_verdict([_evaluation(BetStatus.WON, 100), _evaluation(BetStatus.WON, 100)])

        self.assertEqual(verdict.status, VerdictStatus.WON)
        self.assertEqual(verdict.message, "🎉 Tous les paris gagnés!")
        self.assertEqual(verdict.avg_probability, 100)

    def test_all_lost(self) -> None:
        self.assertEqual(global_verdict([_evaluation(BetStatus.LOST, 0)]).status, VerdictStatus.LOST)

    def test_any_loss_is_partial_loss(self) -> None:
        verdict = global_verdict([_evaluation(BetStatus.LOST, 0), _evaluation(BetStatus.WON, 100)])

        self.assertEqual(verdict.status, VerdictStatus.PARTIAL_LOSS)
        self.assertEqual(verdict.avg_probability, 50)

    def test_partial_win(self) -> None:
        verdict = global_verdict([_evaluation(BetStatus.WON), _evaluation(BetStatus.PENDING)])

        self.assertEqual(verdict.status, VerdictStatus.PARTIAL_WIN)

    def test_trend_verdicts(self) -> None:
        favorable = global_verdict(
            [_evaluation(BetStatus.WINNING), _evaluation(BetStatus.WINNING), _evaluation(BetStatus.LOSING)]
        )
        unfavorable = global_verdict([_evaluation(BetStatus.LOSING), _evaluation(BetStatus.PENDING)])
        neutral = global_verdict([_evaluation(BetStatus.PENDING), _evaluation(BetStatus.PENDING)])

        self.assertEqual(favorable.status, VerdictStatus.FAVORABLE)
        self.assertEqual(unfavorable.status, VerdictStatus.UNFAVORABLE)
        self.assertEqual(neutral.status, VerdictStatus.NEUTRAL)

    def test_pending_without_options_or_kickoff(self) -> None:
        self.assertEqual(global_verdict([]).status, VerdictStatus.PENDING)
        self.assertEqual(global_verdict([], started=True).avg_probability, 0)
        self.assertEqual(
            global_verdict([_evaluation(BetStatus.PENDING)], started=False).status,
            VerdictStatus.PENDING,
        )


class FullLiveTrackingTests(unittest.TestCase):
    def test_consolidated_snapshot(self) -> None:
        client = StubClient(make_snapshot(2, 1, status="2H", elapsed=75))
        options = [held_option("Victoire PSG", 2.10, 100), held_option("Plus de 2.5 buts", 1.80, 50)]

        result = get_full_live_tracking(client, 1, options, bookmaker_name="Bet 365")

        self.assertNotIn("error", result)
        self.assertEqual(client.bookmaker_ids, [8])
        self.assertEqual(result["bookmaker"], {"name": "Bet 365", "id": 8})
        self.assertEqual(result["match"]["score"]["home"], 2)
        self.assertEqual(result["status"]["category"], "live")
        self.assertEqual([o["current_status"] for o in result["options"]], ["winning", "won"])
        self.assertFalse(result["odds"]["available"])
        self.assertTrue(result["hedging"]["available"])
        self.assertEqual(
            [h["hedge_market_key"] for h in result["hedging"]["suggestions"]],
            ["double_chance_x2", "under_2.5"],
        )
        self.assertEqual(result["verdict"]["status"], "favorable")
        self.assertEqual(result["statistics"]["possession"], {"home": 58, "away": 42})

    def test_live_odds_feed(self) -> None:
        client = StubClient(make_snapshot(0, 0, status="1H", elapsed=20), odds_map={"Draw": 2.9})

        result = get_full_live_tracking(client, 1, [held_option("Match nul", 3.30, 40)])

        self.assertTrue(result["odds"]["available"])
        self.assertEqual(result["options"][0]["current_odds"], 2.9)
        self.assertEqual(result["options"][0]["odds_source"], "live")
        self.assertFalse(result["hedging"]["available"])
        self.assertEqual(result["hedging"]["suggestions"], [])

    def test_secondary_feeds_degrade(self) -> None:
        client = StubClient(make_snapshot(1, 0, status="2H", elapsed=60), fail={"statistics", "events", "odds"})

        result = get_full_live_tracking(client, 1, [held_option("Victoire PSG", 2.10, 100)])

        self.assertNotIn("error", result)
        self.assertIsNone(result["statistics"])
        self.assertEqual(result["events"], [])
        self.assertEqual(result["options"][0]["odds_source"], "simulated")

    def test_not_started_verdict_is_pending(self) -> None:
        client = StubClient(make_snapshot(0, 0, status="NS", elapsed=None))

        result = get_full_live_tracking(client, 1, [held_option("Victoire PSG", 2.10, 100)])

        self.assertEqual(result["verdict"]["status"], "pending")

    def test_started_match_without_options(self) -> None:
        client = StubClient(make_snapshot(1, 0, status="2H", elapsed=60))

        result = get_full_live_tracking(client, 1, [])

        self.assertEqual(result["verdict"]["status"], "pending")
        self.assertEqual(result["verdict"]["message"], NO_OPTIONS_MESSAGE)

    def test_match_not_found(self) -> None:
        result = get_full_live_tracking(StubClient(None), 99, [held_option("Victoire PSG", 2.10, 100)])

        self.assertEqual(result["error"], "match_not_found")
        self.assertEqual(result["fixture_id"], 99)

    def test_match_fetch_failure(self) -> None:
        client = StubClient(make_snapshot(), fail={"match"})

        result = get_full_live_tracking(client, 1, [])

        self.assertEqual(result["error"], "match_not_found")
        self.assertIn("match unavailable", result["message"])

    def test_unexpected_failure(self) -> None:
        client = StubClient(make_snapshot(1, 0, status="2H", elapsed=60))

        result = get_full_live_tracking(client, 1, [None])

        self.assertEqual(result["error"], "tracking_failed")


if __name__ == "__main__":
    unittest.main()
