"""Simultaneous order resolution.

All orders of a round execute at once:
1. Overdraft correction (orders from one region scaled to fit its garrison)
2. Per-order validation (adjacency, clamping, zero-troop orders dropped)
3. Classification into reinforcements and attacks, with troops reserved
   (deducted from the source) as each order is accepted
4. Attack resolution per target region, all attackers summed
5. Reinforcements added to their targets
6. Elimination detection

Order problems are corrected or dropped silently so resolution is total and
deterministic; a bad order never fails the round.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from ..models.config import GameConfig
from ..models.order import MoveOrder
from ..models.region import Region
from ..models.result import AttackContribution, RegionDelta, RoundResult

logger = logging.getLogger(__name__)

# (submitting player id, order)
AttributedOrder = Tuple[str, MoveOrder]


@dataclass
class CombatResult:
    """Result of one attack resolution.

    Attributes:
        winner: "attacker" or "defender"
        attacker_survivors: Attacking troops left after casualties
        defender_survivors: Defending troops left after casualties
        garrison: Troops left in the region, for whoever holds it
    """

    winner: str
    attacker_survivors: int
    defender_survivors: int
    garrison: int


@dataclass
class _Attack:
    """One accepted attacking order."""

    player_id: str
    troops: int
    index: int  # Position in the submitted order list


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's round() uses banker's rounding (round(2.5) == 2); troop math
    always rounds 0.5 up.
    """
    return math.floor(value + 0.5)


def resolve_combat(
    attacking_troops: int, defending_troops: int, defense_advantage: float
) -> CombatResult:
    """Resolve total attacking troops against a region's defenders.

    Combat rules:
    - No defenders: attacker occupies with everything sent, no losses
    - Otherwise attacker keeps round(A * (1 - adv)), defender keeps
      round(D * adv); the larger side holds the region with the difference,
      never fewer than 1 troop. Equal survivors favor the defender.

    Args:
        attacking_troops: Sum of all attacking troops on the target
        defending_troops: Troops in the target region
        defense_advantage: Fraction in [0, 1] favoring the defender

    Returns:
        CombatResult with winner and remaining garrison

    Examples:
        >>> resolve_combat(6, 4, 0.55).garrison
        1
    """
    if defending_troops == 0:
        return CombatResult(
            winner="attacker",
            attacker_survivors=attacking_troops,
            defender_survivors=0,
            garrison=attacking_troops,
        )

    attack_survivors = round_half_up(attacking_troops * (1 - defense_advantage))
    def_survivors = round_half_up(defending_troops * defense_advantage)

    if attack_survivors > def_survivors:
        return CombatResult(
            winner="attacker",
            attacker_survivors=attack_survivors,
            defender_survivors=def_survivors,
            garrison=max(1, attack_survivors - def_survivors),
        )
    return CombatResult(
        winner="defender",
        attacker_survivors=attack_survivors,
        defender_survivors=def_survivors,
        garrison=max(1, def_survivors - attack_survivors),
    )


def resolve_round(
    regions: List[Region], orders: List[AttributedOrder], config: GameConfig
) -> RoundResult:
    """Resolve one round of orders against the map.

    Regions are updated in place. The returned result lists a delta for every
    region whose owner or troop count changed, including sources that only
    lost reserved troops, plus every attacked region.

    Args:
        regions: Authoritative region list (mutated)
        orders: (player_id, order) pairs in submission order
        config: Game configuration (defense_advantage)

    Returns:
        RoundResult with round number 0; the caller fills it in
    """
    region_by_id = {region.id: region for region in regions}
    owner_before = {region.id: region.owner_id for region in regions}
    troops_before = {region.id: region.troops for region in regions}

    owned_orders = _drop_foreign_orders(orders, owner_before)
    funded_orders = _correct_overdraft(owned_orders, region_by_id)

    attacks: Dict[str, List[_Attack]] = {}
    reinforcements: Dict[str, int] = {}

    for index, (player_id, order) in enumerate(funded_orders):
        source = region_by_id[order.from_region_id]
        target = region_by_id.get(order.to_region_id)
        if target is None:
            logger.debug(f"Dropping order to unknown region {order.to_region_id}")
            continue
        if not source.is_adjacent(target.id):
            logger.debug(f"Dropping order {source.id} -> {target.id}: not adjacent")
            continue

        troops = min(order.troops, max(0, source.troops - 1))
        if troops <= 0:
            continue

        # Reserve now so the source can't fund more than its balance
        source.troops -= troops

        if owner_before[target.id] == player_id:
            reinforcements[target.id] = reinforcements.get(target.id, 0) + troops
        else:
            attacks.setdefault(target.id, []).append(
                _Attack(player_id=player_id, troops=troops, index=index)
            )

    for region_id, group in attacks.items():
        region = region_by_id[region_id]
        total = sum(attack.troops for attack in group)
        result = resolve_combat(total, region.troops, config.defense_advantage)
        if result.winner == "attacker":
            region.owner_id = _dominant_attacker(group)
        region.troops = result.garrison
        logger.debug(
            f"Attack on {region_id}: {total} vs defenders -> {result.winner} "
            f"holds with {result.garrison}"
        )

    for region_id, troops in reinforcements.items():
        region_by_id[region_id].troops += troops

    deltas = []
    for region in regions:
        changed = (
            region.owner_id != owner_before[region.id]
            or region.troops != troops_before[region.id]
        )
        if not changed and region.id not in attacks:
            continue
        deltas.append(
            RegionDelta(
                region_id=region.id,
                new_owner_id=region.owner_id,
                new_troops=region.troops,
                attackers=[
                    AttackContribution(player_id=a.player_id, troops=a.troops)
                    for a in attacks.get(region.id, [])
                ],
            )
        )

    return RoundResult(
        round=0,
        region_deltas=deltas,
        eliminated=_find_eliminated(owner_before, regions),
        winner=None,
    )


def _drop_foreign_orders(
    orders: List[AttributedOrder], owner_before: Dict[str, Optional[str]]
) -> List[AttributedOrder]:
    """Keep only orders whose source exists and belongs to the submitter.

    Args:
        orders: (player_id, order) pairs
        owner_before: Region id -> owner at the start of resolution

    Returns:
        Filtered orders, original order preserved
    """
    kept = []
    for player_id, order in orders:
        if order.from_region_id not in owner_before:
            logger.debug(f"Dropping order from unknown region {order.from_region_id}")
            continue
        if owner_before[order.from_region_id] != player_id:
            logger.debug(
                f"Dropping order from {order.from_region_id}: not owned by {player_id}"
            )
            continue
        kept.append((player_id, order))
    return kept


def _correct_overdraft(
    orders: List[AttributedOrder], region_by_id: Dict[str, Region]
) -> List[AttributedOrder]:
    """Scale orders from any region that asked for more than it can send.

    A region can commit at most ``troops - 1`` (one troop stays as garrison).
    When its orders request more, each order becomes
    floor(requested * available / total_requested). Orders are copied, never
    mutated.

    Args:
        orders: (player_id, order) pairs with known source regions
        region_by_id: Region lookup

    Returns:
        Orders with troop counts scaled where needed
    """
    requested: Dict[str, int] = {}
    for _, order in orders:
        requested[order.from_region_id] = requested.get(order.from_region_id, 0) + order.troops

    corrected = []
    for player_id, order in orders:
        total = requested[order.from_region_id]
        available = max(0, region_by_id[order.from_region_id].troops - 1)
        if total > available:
            order = replace(order, troops=order.troops * available // total)
        corrected.append((player_id, order))
    return corrected


def _dominant_attacker(group: List[_Attack]) -> str:
    """Player behind the single largest attacking order.

    Orders are compared individually, not summed per player. Ties go to the
    order that came earliest in the submitted order list.
    """
    return max(group, key=lambda attack: (attack.troops, -attack.index)).player_id


def _find_eliminated(
    owner_before: Dict[str, Optional[str]], regions: List[Region]
) -> List[str]:
    """Players who owned at least one region before resolution and none after.

    Returns:
        Player ids in order of their first region on the map
    """
    owners_after = {region.owner_id for region in regions if region.owner_id is not None}
    eliminated = []
    for owner in owner_before.values():
        if owner is None or owner in owners_after or owner in eliminated:
            continue
        eliminated.append(owner)
    return eliminated
