"""Axial hex-grid math.

Cells are addressed with axial coordinates (q, r). Distance uses the cube
form (x = q, z = r, y = -q - r), where it reduces to half the sum of the
absolute coordinate differences.

Reference: https://www.redblobgames.com/grids/hexagons/
"""

from ..models.region import HexCoord

CENTER = HexCoord(q=0, r=0)

# The 6 axial unit directions, counter-clockwise from east
HEX_DIRECTIONS: tuple[HexCoord, ...] = (
    HexCoord(q=1, r=0),
    HexCoord(q=1, r=-1),
    HexCoord(q=0, r=-1),
    HexCoord(q=-1, r=0),
    HexCoord(q=-1, r=1),
    HexCoord(q=0, r=1),
)


def hex_distance(a: HexCoord, b: HexCoord) -> int:
    """Number of steps between two cells.

    Examples:
        >>> hex_distance(HexCoord(0, 0), HexCoord(2, -1))
        2
    """
    return (abs(a.q - b.q) + abs(a.q + a.r - b.q - b.r) + abs(a.r - b.r)) // 2


def hex_neighbors(coord: HexCoord) -> list[HexCoord]:
    """All 6 adjacent coordinates, whether or not they exist on a map."""
    return [HexCoord(q=coord.q + d.q, r=coord.r + d.r) for d in HEX_DIRECTIONS]


def generate_hex_grid(radius: int) -> list[HexCoord]:
    """Every cell within ``radius`` of the center, in q-major order.

    A radius of r yields 3r² + 3r + 1 cells (the center plus r rings).

    Args:
        radius: Grid radius (0 gives the single center cell)

    Returns:
        List of coordinates
    """
    if radius < 0:
        raise ValueError(f"Invalid radius: {radius} (must be >= 0)")

    cells = []
    for q in range(-radius, radius + 1):
        r_min = max(-radius, -q - radius)
        r_max = min(radius, -q + radius)
        for r in range(r_min, r_max + 1):
            cells.append(HexCoord(q=q, r=r))
    return cells
