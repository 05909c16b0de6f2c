from __future__ import annotations

import unittest

from models import BetKind, OptionDescriptor, Side
from option_parser import format_option, parse_option


class OptionParserTests(unittest.TestCase):
    # ── 1X2 ──
    def test_home_win_from_team_name(self):
        self.assertEqual(parse_option("Victoire PSG"), OptionDescriptor.winner(Side.HOME))

    def test_away_win(self):
        self.assertEqual(parse_option("Victoire Lyon (extérieur)"), OptionDescriptor.winner(Side.AWAY))
        self.assertEqual(parse_option("Away win"), OptionDescriptor.winner(Side.AWAY))

    def test_english_home_win(self):
        self.assertEqual(parse_option("Home win"), OptionDescriptor.winner(Side.HOME))

    def test_numbered_win(self):
        self.assertEqual(parse_option("Win 1"), OptionDescriptor.winner(Side.HOME))
        self.assertEqual(parse_option("Win 2"), OptionDescriptor.winner(Side.AWAY))
        self.assertEqual(parse_option("win2"), OptionDescriptor.winner(Side.AWAY))

    def test_draw(self):
        self.assertEqual(parse_option("Match nul"), OptionDescriptor.draw())
        self.assertEqual(parse_option("DRAW"), OptionDescriptor.draw())

    # ── double chance ──
    def test_double_chance_codes(self):
        self.assertEqual(parse_option("Double chance 1X"), OptionDescriptor.double_chance(Side.HOME, Side.DRAW))
        self.assertEqual(parse_option("Double chance X2"), OptionDescriptor.double_chance(Side.AWAY, Side.DRAW))
        self.assertEqual(parse_option("Double chance 12"), OptionDescriptor.double_chance(Side.HOME, Side.AWAY))

    def test_double_chance_words(self):
        self.assertEqual(
            parse_option("Double chance Domicile ou Nul"),
            OptionDescriptor.double_chance(Side.HOME, Side.DRAW),
        )
        self.assertEqual(
            parse_option("Double chance Extérieur ou Nul"),
            OptionDescriptor.double_chance(Side.AWAY, Side.DRAW),
        )
        self.assertEqual(
            parse_option("Double chance domicile ou extérieur"),
            OptionDescriptor.double_chance(Side.HOME, Side.AWAY),
        )

    def test_double_chance_is_not_a_draw(self):
        self.assertEqual(parse_option("Double chance Nul ou Domicile").kind, BetKind.DOUBLE_CHANCE)

    # ── totals ──
    def test_over(self):
        self.assertEqual(parse_option("Plus de 2.5 buts"), OptionDescriptor.over(2.5))
        self.assertEqual(parse_option("Over 1.5"), OptionDescriptor.over(1.5))

    def test_under_with_decimal_comma(self):
        self.assertEqual(parse_option("Moins de 3,5 buts"), OptionDescriptor.under(3.5))
        self.assertEqual(parse_option("under 0.5"), OptionDescriptor.under(0.5))

    # ── BTTS ──
    def test_btts(self):
        self.assertEqual(parse_option("Les deux équipes marquent - Oui"), OptionDescriptor.btts(True))
        self.assertEqual(parse_option("BTTS Yes"), OptionDescriptor.btts(True))
        self.assertEqual(parse_option("BTTS No"), OptionDescriptor.btts(False))

    # ── handicap ──
    def test_asian_handicap(self):
        self.assertEqual(
            parse_option("Asian Handicap Away +0.5"),
            OptionDescriptor.asian_handicap(Side.AWAY, 0.5),
        )
        self.assertEqual(parse_option("Handicap -1.5"), OptionDescriptor.asian_handicap(Side.HOME, -1.5))

    # ── correct score ──
    def test_correct_score(self):
        self.assertEqual(parse_option("Score exact 2-1"), OptionDescriptor.correct_score(2, 1))
        self.assertEqual(parse_option("Score exact : 0:0"), OptionDescriptor.correct_score(0, 0))

    # ── misses ──
    def test_unknown(self):
        self.assertEqual(parse_option("Premier buteur Mbappé").kind, BetKind.UNKNOWN)
        self.assertEqual(parse_option("").kind, BetKind.UNKNOWN)

    def test_canonical_phrase_reads_back(self):
        descriptors = [
            OptionDescriptor.winner(Side.HOME),
            OptionDescriptor.winner(Side.AWAY),
            OptionDescriptor.draw(),
            OptionDescriptor.double_chance(Side.HOME, Side.DRAW),
            OptionDescriptor.double_chance(Side.AWAY, Side.DRAW),
            OptionDescriptor.double_chance(Side.HOME, Side.AWAY),
            OptionDescriptor.over(0.5),
            OptionDescriptor.over(3.5),
            OptionDescriptor.under(2.5),
            OptionDescriptor.under(4.5),
            OptionDescriptor.btts(True),
            OptionDescriptor.btts(False),
            OptionDescriptor.asian_handicap(Side.HOME, -1.5),
            OptionDescriptor.asian_handicap(Side.AWAY, 0.5),
            OptionDescriptor.asian_handicap(Side.HOME, 0.0),
            OptionDescriptor.correct_score(2, 1),
            OptionDescriptor.unknown(),
        ]
        for d in descriptors:
            with self.subTest(phrase=format_option(d)):
                self.assertEqual(parse_option(format_option(d)), d)


if __name__ == "__main__":
    unittest.main()
