"""
connectivity.py — walkway adjacency derived from a floor's paint map.

Rules (all recomputed from the map on every call, nothing is cached):

  * primary edges   : N/S/E/W neighbours that are walkway cells.
  * secondary edges : diagonal walkway neighbours, kept only when the two
                      orthogonal cells between them are NOT both walkway
                      (an L-shaped route already covers that move).
  * sharp corner    : advisory flag on a walkway cell with a walkway pair
                      at (N,E), (N,W), (S,E) or (S,W); never alters edges.

The suppression test only looks at the two cells shared by both ends, so the
edge relation is symmetric.
"""
from collections import deque
from typing import Dict, List, Mapping, Tuple

from .constants import WALKWAY, category_of

CellKey = Tuple[int, int]

NORTH, SOUTH, EAST, WEST = (-1, 0), (1, 0), (0, 1), (0, -1)
ORTHOGONAL = (NORTH, SOUTH, EAST, WEST)
DIAGONAL = ((-1, 1), (-1, -1), (1, 1), (1, -1))   # NE, NW, SE, SW
PERPENDICULAR_PAIRS = ((NORTH, EAST), (NORTH, WEST), (SOUTH, EAST), (SOUTH, WEST))


def is_walkway(cells: Mapping[CellKey, str], cell: CellKey) -> bool:
    return category_of(cells.get(cell)) == WALKWAY


def primary_edges(cells, row, col) -> List[CellKey]:
    if not is_walkway(cells, (row, col)):
        return []
    return [(row + dr, col + dc) for dr, dc in ORTHOGONAL
            if is_walkway(cells, (row + dr, col + dc))]


def secondary_edges(cells, row, col) -> List[CellKey]:
    if not is_walkway(cells, (row, col)):
        return []
    out = []
    for dr, dc in DIAGONAL:
        if not is_walkway(cells, (row + dr, col + dc)):
            continue
        leg_v = is_walkway(cells, (row + dr, col))
        leg_h = is_walkway(cells, (row, col + dc))
        if not (leg_v and leg_h):
            out.append((row + dr, col + dc))
    return out


def neighbors(cells, row, col) -> List[CellKey]:
    return primary_edges(cells, row, col) + secondary_edges(cells, row, col)


def is_sharp_corner(cells, row, col) -> bool:
    if not is_walkway(cells, (row, col)):
        return False
    for (ar, ac), (br, bc) in PERPENDICULAR_PAIRS:
        if is_walkway(cells, (row + ar, col + ac)) and is_walkway(cells, (row + br, col + bc)):
            return True
    return False


def walkway_cells(cells) -> List[CellKey]:
    return sorted(c for c in cells if is_walkway(cells, c))


def sharp_corners(cells) -> List[CellKey]:
    return [c for c in walkway_cells(cells) if is_sharp_corner(cells, *c)]


def adjacency(cells) -> Dict[CellKey, List[CellKey]]:
    """Walkway cell -> list of neighbours (primary first, then secondary)."""
    return {c: neighbors(cells, *c) for c in walkway_cells(cells)}


def connection_segments(cells) -> List[Tuple[CellKey, CellKey, str]]:
    """Undirected (a, b, kind) segments, each listed once with a < b."""
    segs = []
    for a in walkway_cells(cells):
        for b in primary_edges(cells, *a):
            if a < b:
                segs.append((a, b, "primary"))
        for b in secondary_edges(cells, *a):
            if a < b:
                segs.append((a, b, "secondary"))
    return segs


def connected_components(cells) -> List[List[CellKey]]:
    """Walkway islands, largest first."""
    adj = adjacency(cells)
    seen = set()
    comps = []
    for start in adj:
        if start in seen:
            continue
        seen.add(start)
        queue = deque([start])
        comp = []
        while queue:
            u = queue.popleft()
            comp.append(u)
            for v in adj[u]:
                if v not in seen:
                    seen.add(v)
                    queue.append(v)
        comps.append(sorted(comp))
    comps.sort(key=lambda c: (-len(c), c[0]))
    return comps
