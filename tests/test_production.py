"""Tests for per-round production and control streaks."""

from hexategy.engine.production import ProductionEngine
from hexategy.models import GameConfig, HexCoord, Region


def make_cluster(owner="p1"):
    """Region x with two neighbors y and z, all owned by ``owner``."""
    return [
        Region(id="x", coord=HexCoord(0, 0), owner_id=owner, troops=1, neighbors=["y", "z"]),
        Region(id="y", coord=HexCoord(1, 0), owner_id=owner, troops=1, neighbors=["x"]),
        Region(id="z", coord=HexCoord(0, 1), owner_id=owner, troops=1, neighbors=["x"]),
    ]


def test_base_production():
    regions = [Region(id="a", coord=HexCoord(0, 0), owner_id="p1", troops=3)]
    produced = ProductionEngine().apply(regions, GameConfig())
    assert produced == {"a": 2}
    assert regions[0].troops == 5


def test_neutral_regions_produce_nothing():
    regions = [Region(id="a", coord=HexCoord(0, 0), owner_id=None, troops=4)]
    engine = ProductionEngine()
    assert engine.apply(regions, GameConfig()) == {}
    assert regions[0].troops == 4
    assert engine.streak_for("a") == 0


def test_neighbor_bonus_and_streak():
    """Two owned neighbors: +4 for two rounds, then +7 once the streak bonus applies."""
    regions = make_cluster()
    engine = ProductionEngine()
    config = GameConfig()

    gains = [engine.apply(regions, config)["x"] for _ in range(4)]

    assert gains == [4, 4, 7, 7]
    assert engine.streak_for("x") == 4
    assert regions[0].troops == 1 + 4 + 4 + 7 + 7


def test_owner_change_resets_streak():
    regions = make_cluster()
    engine = ProductionEngine()
    config = GameConfig()
    for _ in range(3):
        engine.apply(regions, config)
    assert engine.streak_for("x") == 3

    regions[0].owner_id = "p2"
    produced = engine.apply(regions, config)

    assert engine.streak_for("x") == 1
    assert produced["x"] == 2  # no same-owner neighbors, no bonus


def test_skipped_regions_count_streak_but_get_nothing():
    regions = make_cluster()
    engine = ProductionEngine()

    produced = engine.apply(regions, GameConfig(), skip={"x"})

    assert "x" not in produced
    assert regions[0].troops == 1
    assert engine.streak_for("x") == 1


def test_reset_all():
    regions = make_cluster()
    engine = ProductionEngine()
    engine.apply(regions, GameConfig())
    engine.reset_all()
    assert engine.streak_for("x") == 0


def test_engines_do_not_share_streaks():
    regions = make_cluster()
    first, second = ProductionEngine(), ProductionEngine()
    first.apply(regions, GameConfig())
    assert second.streak_for("x") == 0
