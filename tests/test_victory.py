"""Tests for victory condition checking."""

import pytest

from hexategy.engine.victory import VictoryEvaluator
from hexategy.models import GameConfig, HexCoord, PlayerInfo, Region


def make_players(*ids, eliminated=()):
    return [
        PlayerInfo(id=pid, name=pid, color="#ffffff", is_eliminated=pid in eliminated)
        for pid in ids
    ]


def make_map(owners):
    """One region per owner entry; the first region is the center cell."""
    return [
        Region(id=f"r{i}", coord=HexCoord(i, 0), owner_id=owner, troops=1)
        for i, owner in enumerate(owners)
    ]


def test_total_conquest():
    players = make_players("p1", "p2")
    evaluator = VictoryEvaluator()
    config = GameConfig(victory_condition="total_conquest")

    assert evaluator.check(make_map(["p1"] * 10), players, config, round=4) == "p1"
    assert evaluator.check(make_map(["p1"] * 9 + ["p2"]), players, config, round=4) is None


def test_last_player_standing_wins_any_condition():
    players = make_players("p1", "p2", eliminated={"p2"})
    config = GameConfig(victory_condition="hill_control", victory_param=99)
    assert VictoryEvaluator().check(make_map(["p1", None]), players, config, round=1) == "p1"


def test_no_active_players():
    players = make_players("p1", eliminated={"p1"})
    assert VictoryEvaluator().check(make_map([None]), players, GameConfig(), round=1) is None


def test_map_percent():
    players = make_players("p1", "p2")
    config = GameConfig(victory_condition="map_percent", victory_param=60)
    evaluator = VictoryEvaluator()

    assert evaluator.check(make_map(["p1"] * 6 + ["p2"] * 4), players, config, 1) == "p1"
    assert evaluator.check(make_map(["p1"] * 5 + ["p2"] * 5), players, config, 1) is None


class TestScoreRounds:
    """Test the round-cap condition."""

    def test_before_cap(self):
        config = GameConfig(victory_condition="score_rounds", max_rounds=5)
        regions = make_map(["p1", "p1", "p2"])
        assert VictoryEvaluator().check(regions, make_players("p1", "p2"), config, 4) is None

    def test_at_cap_leader_wins(self):
        config = GameConfig(victory_condition="score_rounds", max_rounds=5)
        regions = make_map(["p2", "p1", "p2"])
        assert VictoryEvaluator().check(regions, make_players("p1", "p2"), config, 5) == "p2"

    def test_tie_goes_to_first_registered(self):
        config = GameConfig(victory_condition="score_rounds", max_rounds=5)
        regions = make_map(["p2", "p1"])
        assert VictoryEvaluator().check(regions, make_players("p1", "p2"), config, 5) == "p1"

    def test_no_cap_never_ends(self):
        config = GameConfig(victory_condition="score_rounds", max_rounds=None)
        regions = make_map(["p1", "p1", "p2"])
        assert VictoryEvaluator().check(regions, make_players("p1", "p2"), config, 500) is None


class TestHillControl:
    """Test the center-holding condition."""

    @pytest.fixture
    def config(self):
        return GameConfig(victory_condition="hill_control", victory_param=5)

    def test_five_consecutive_holds_win(self, config):
        evaluator = VictoryEvaluator()
        players = make_players("p1", "p2")
        regions = make_map(["p1", "p2"])

        results = [evaluator.check(regions, players, config, n) for n in range(1, 6)]

        assert results == [None, None, None, None, "p1"]

    def test_ownership_change_resets_streaks(self, config):
        evaluator = VictoryEvaluator()
        players = make_players("p1", "p2")
        regions = make_map(["p1", "p2"])
        for n in range(3):
            evaluator.check(regions, players, config, n)
        assert evaluator.hill_streak("p1") == 3

        regions[0].owner_id = "p2"
        evaluator.check(regions, players, config, 4)

        assert evaluator.hill_streak("p2") == 1
        assert evaluator.hill_streak("p1") == 0

    def test_neutral_hill_changes_nothing(self, config):
        evaluator = VictoryEvaluator()
        players = make_players("p1", "p2")
        regions = make_map(["p1", "p2"])
        evaluator.check(regions, players, config, 1)

        regions[0].owner_id = None
        assert evaluator.check(regions, players, config, 2) is None
        assert evaluator.hill_streak("p1") == 1

    def test_reset_all(self, config):
        evaluator = VictoryEvaluator()
        evaluator.check(make_map(["p1", "p2"]), make_players("p1", "p2"), config, 1)
        evaluator.reset_all()
        assert evaluator.hill_streak("p1") == 0
