"""Per-viewer redaction of the map.

Visibility never changes authoritative state. These functions take the
authoritative region list and return redacted wire dicts for one viewer,
to be applied at send time by whoever delivers state to that viewer.

Modes:
- full: everything visible
- fog_of_war: owners visible everywhere, troop counts only on the viewer's
  regions and their neighbors
- fog_strict: only the viewer's regions and their neighbors are visible at
  all; elsewhere owner and troops are hidden
"""

from typing import Any, Dict, List, Optional, Set

from ..models.region import Region
from ..protocol import MsgType
from ..utils.serialization import serialize_region


def visible_region_ids(regions: List[Region], viewer_id: Optional[str]) -> Set[str]:
    """The viewer's regions plus every region adjacent to them."""
    visible: Set[str] = set()
    if viewer_id is None:
        return visible
    for region in regions:
        if region.owner_id == viewer_id:
            visible.add(region.id)
            visible.update(region.neighbors)
    return visible


def project_regions(
    regions: List[Region], viewer_id: Optional[str], mode: str
) -> List[Dict[str, Any]]:
    """Serialize regions as seen by ``viewer_id``.

    Hidden values are None. Every dict carries ``visible`` telling the client
    whether the region is within the viewer's sight.

    Args:
        regions: Authoritative region list (not modified)
        viewer_id: Player viewing the map (None for a spectator)
        mode: "full", "fog_of_war" or "fog_strict"

    Returns:
        One wire dict per region, in map order
    """
    if mode == "full":
        return [{**serialize_region(region), "visible": True} for region in regions]

    in_sight = visible_region_ids(regions, viewer_id)
    projected = []
    for region in regions:
        data = serialize_region(region)
        seen = region.id in in_sight
        data["visible"] = seen
        if not seen:
            data["troops"] = None
            if mode == "fog_strict":
                data["ownerId"] = None
        projected.append(data)
    return projected


def project_deltas(
    deltas: List[Dict[str, Any]],
    regions: List[Region],
    viewer_id: Optional[str],
    mode: str,
) -> List[Dict[str, Any]]:
    """Filter serialized round deltas down to what the viewer may see.

    Args:
        deltas: ``regionDeltas`` entries of a serialized RoundResult
        regions: Authoritative regions after resolution
        viewer_id: Player receiving the deltas
        mode: Visibility mode

    Returns:
        Deltas for regions in sight (all of them in full mode)
    """
    if mode == "full":
        return list(deltas)
    in_sight = visible_region_ids(regions, viewer_id)
    return [delta for delta in deltas if delta["regionId"] in in_sight]


def project_message(
    msg_type: str,
    payload: Dict[str, Any],
    regions: List[Region],
    viewer_id: Optional[str],
    mode: str,
) -> Dict[str, Any]:
    """Redact one outbound message for a single recipient.

    Only ``game:state`` and ``round:resolve`` carry map data; every other
    payload is returned unchanged.
    """
    if mode == "full":
        return payload
    if msg_type == MsgType.GAME_STATE:
        return {**payload, "regions": project_regions(regions, viewer_id, mode)}
    if msg_type == MsgType.ROUND_RESOLVE:
        deltas = payload.get("regionDeltas", [])
        return {**payload, "regionDeltas": project_deltas(deltas, regions, viewer_id, mode)}
    return payload
