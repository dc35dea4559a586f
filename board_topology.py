#board_topology.py
import itertools
from typing import Dict, List, NamedTuple, Tuple

import numpy as np

from errors import InvalidConfiguration

# Layout of the pyramid, only used for rendering and for finding diagonals
BOARD_WIDTH = 600
HORIZONTAL_SPACING = 92
VERTICAL_SPACING = 75
COORD_TOLERANCE = 1e-3

MIN_LAYERS = 2


class Node(NamedTuple):
    id: int
    layer: int
    offset: int
    x: float
    y: float


class Line(NamedTuple):
    id: int
    node1: int
    node2: int
    kind: str  # 'horizontal', 'right-diagonal' or 'left-diagonal'


class Triangle(NamedTuple):
    id: int
    nodes: Tuple[int, int, int]
    lines: Tuple[int, int, int]


def calculate_node_positions(num_layers: int) -> List[Node]:
    nodes = []
    for layer in range(num_layers):
        layer_width = (layer + 1) * HORIZONTAL_SPACING
        start_x = (BOARD_WIDTH - layer_width) / 2 + HORIZONTAL_SPACING / 2
        y = (layer + 1) * VERTICAL_SPACING
        for offset in range(layer + 1):
            nodes.append(Node(len(nodes), layer, offset, start_x + offset * HORIZONTAL_SPACING, y))
    return nodes


def generate_lines(nodes: List[Node], num_layers: int) -> List[Line]:
    """
    Horizontal lines join consecutive nodes of a layer. Each node is then joined
    to the node half a spacing to its lower-right and lower-left, looked up by
    coordinates.
    """
    coords = np.array([(node.x, node.y) for node in nodes], dtype=np.float64)
    layers = np.array([node.layer for node in nodes], dtype=np.int16)

    def find_node_by_coords(x, y):
        hits = np.flatnonzero(np.all(np.abs(coords - (x, y)) < COORD_TOLERANCE, axis=1))
        return int(hits[0]) if hits.size else None

    lines = []
    for layer in range(num_layers):
        layer_nodes = np.flatnonzero(layers == layer)
        for a, b in zip(layer_nodes[:-1], layer_nodes[1:]):
            lines.append(Line(len(lines), int(a), int(b), 'horizontal'))

    for layer in range(num_layers - 1):
        for node_id in np.flatnonzero(layers == layer):
            node = nodes[node_id]
            for kind, dx in (('right-diagonal', HORIZONTAL_SPACING / 2), ('left-diagonal', -HORIZONTAL_SPACING / 2)):
                target = find_node_by_coords(node.x + dx, node.y + VERTICAL_SPACING)
                if target is not None:
                    lines.append(Line(len(lines), int(node_id), target, kind))
    return lines


def generate_triangles(nodes: List[Node], lines: List[Line]) -> List[Triangle]:
    line_lookup = {(line.node1, line.node2): line.id for line in lines}

    def find_line(a, b):
        return line_lookup.get((a, b) if a < b else (b, a))

    triangles = []
    seen = set()
    for n1, n2, n3 in itertools.combinations(nodes, 3):
        line_ids = (find_line(n1.id, n2.id), find_line(n2.id, n3.id), find_line(n3.id, n1.id))
        if None in line_ids:
            continue
        if not is_minimal(n1.layer, n2.layer, n3.layer):
            continue
        key = tuple(sorted((n1.id, n2.id, n3.id)))
        if key in seen:
            continue
        seen.add(key)
        triangles.append(Triangle(len(triangles), key, line_ids))
    return triangles


def is_minimal(*layers) -> bool:
    # Two nodes on one layer, the third on the layer just above or below
    low, mid, high = sorted(layers)
    return (low == mid and high == mid + 1) or (mid == high and low == mid - 1)


class BoardTopology:
    """
    Immutable graph of the pyramid: nodes, lines and elementary triangles, plus
    the NumPy lookup tables the rules and the search read on every move.

    Built once per game and shared by reference between a game and its clones.
    """

    def __init__(self, num_layers: int):
        if num_layers is None or int(num_layers) < MIN_LAYERS:
            raise InvalidConfiguration(f"A board needs at least {MIN_LAYERS} layers, got {num_layers}.")
        self.num_layers = int(num_layers)
        self.nodes = calculate_node_positions(self.num_layers)
        self.lines = generate_lines(self.nodes, self.num_layers)
        self.triangles = generate_triangles(self.nodes, self.lines)

        self.line_nodes = np.array([(line.node1, line.node2) for line in self.lines], dtype=np.int16)
        self.triangle_lines = np.array([t.lines for t in self.triangles], dtype=np.int16).reshape(-1, 3)

        line_triangles: Dict[int, List[int]] = {line.id: [] for line in self.lines}
        for triangle in self.triangles:
            for line_id in triangle.lines:
                line_triangles[line_id].append(triangle.id)
        self.line_triangles = tuple(tuple(line_triangles[line.id]) for line in self.lines)

        for arr in (self.line_nodes, self.triangle_lines):
            arr.flags.writeable = False

    @property
    def num_lines(self) -> int:
        return len(self.lines)

    @property
    def num_triangles(self) -> int:
        return len(self.triangles)

    def find_line(self, node1: int, node2: int):
        """Return the id of the line joining two nodes, or None."""
        a, b = (node1, node2) if node1 < node2 else (node2, node1)
        hits = np.flatnonzero((self.line_nodes[:, 0] == a) & (self.line_nodes[:, 1] == b))
        return int(hits[0]) if hits.size else None

    def __repr__(self):
        return (f"BoardTopology(layers={self.num_layers}, nodes={len(self.nodes)}, "
                f"lines={self.num_lines}, triangles={self.num_triangles})")


def generate(num_layers: int) -> Tuple[List[Node], List[Line], List[Triangle]]:
    topology = BoardTopology(num_layers)
    return topology.nodes, topology.lines, topology.triangles
