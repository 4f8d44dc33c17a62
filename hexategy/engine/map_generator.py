"""Hex map generation and starting placement."""

import logging
import math
from typing import List, Optional

from ..models.config import GameConfig
from ..models.region import Region
from ..utils import CLUSTER_RING_FRACTION, START_TROOPS, GameRNG
from ..utils.hex_math import CENTER, generate_hex_grid, hex_distance, hex_neighbors

logger = logging.getLogger(__name__)


def generate_map(
    player_ids: List[str], config: GameConfig, rng: Optional[GameRNG] = None
) -> List[Region]:
    """Build the hex grid and give each player their starting regions.

    Algorithm:
    1. Generate every cell within ``config.map_radius`` of the center
       (center plus concentric rings); region ids follow generation order
    2. Link each region to its existing neighbors along the 6 axial directions
    3. Place one start region per player, 3 troops each:
       - random: any region
       - clustered: only the outer band (distance >= 60% of the max distance)
    4. If ``start_regions > 1``, run ``start_regions - 1`` expansion passes

    Players beyond the number of available start cells get no region.

    Args:
        player_ids: Players to place, in registry order
        config: Game configuration (map_size, start_placement, start_regions)
        rng: Random number generator; a fresh unseeded one if omitted

    Returns:
        All regions of the new map
    """
    rng = rng or GameRNG()

    cells = generate_hex_grid(config.map_radius)
    regions = [
        Region(id=f"r{i}", coord=coord, owner_id=None, troops=0)
        for i, coord in enumerate(cells)
    ]

    region_by_coord = {region.coord: region for region in regions}
    for region in regions:
        region.neighbors = [
            region_by_coord[n].id for n in hex_neighbors(region.coord) if n in region_by_coord
        ]

    if config.start_placement == "clustered":
        candidates = _outer_band(regions)
    else:
        candidates = regions

    starts = rng.shuffled(candidates)[: len(player_ids)]
    for player_id, region in zip(player_ids, starts):
        region.owner_id = player_id
        region.troops = START_TROOPS

    if len(starts) < len(player_ids):
        logger.warning(
            f"Only {len(starts)} start regions available for {len(player_ids)} players"
        )

    extra = max(1, config.start_regions) - 1
    if extra > 0:
        _expand_territories(regions, player_ids, extra, rng)

    logger.info(
        f"Generated map: radius={config.map_radius}, regions={len(regions)}, "
        f"players={len(player_ids)}, placement={config.start_placement}"
    )
    return regions


def _outer_band(regions: List[Region]) -> List[Region]:
    """Regions in the outer ~40% of the map, for clustered starts.

    Args:
        regions: All map regions

    Returns:
        Regions whose distance from the center is at least
        floor(0.6 * max distance present)
    """
    max_dist = max(hex_distance(r.coord, CENTER) for r in regions)
    threshold = math.floor(max_dist * CLUSTER_RING_FRACTION)
    return [r for r in regions if hex_distance(r.coord, CENTER) >= threshold]


def _expand_territories(
    regions: List[Region], player_ids: List[str], passes: int, rng: GameRNG
) -> None:
    """Grow each player's starting territory by one region per pass.

    Each pass visits players in a freshly shuffled order. A player claims one
    unclaimed region adjacent to their territory, uniformly at random among
    candidates. When two players' candidates overlap, whoever comes first in
    that pass's order gets the region; a player with no candidate left is
    skipped for the pass.

    Args:
        regions: All map regions (mutated)
        player_ids: Players to expand
        passes: Number of expansion passes
        rng: Random number generator
    """
    region_by_id = {region.id: region for region in regions}

    for _ in range(passes):
        for player_id in rng.shuffled(player_ids):
            candidates = []
            seen = set()
            for region in regions:
                if region.owner_id != player_id:
                    continue
                for neighbor_id in region.neighbors:
                    if neighbor_id in seen:
                        continue
                    seen.add(neighbor_id)
                    if region_by_id[neighbor_id].owner_id is None:
                        candidates.append(region_by_id[neighbor_id])

            if not candidates:
                logger.debug(f"Player {player_id} has no room to expand this pass")
                continue

            pick = rng.choice(candidates)
            pick.owner_id = player_id
            pick.troops = START_TROOPS
