"""Layered (Sugiyama-style) placement of table nodes.

The pipeline runs on a ``networkx.DiGraph`` keyed by node index so that
tables sharing a name still get a box each:

1. reverse DFS back edges so the graph is acyclic,
2. rank nodes by longest path, pulling sources next to their successors,
3. split edges spanning several ranks with zero-size dummy nodes,
4. reorder each rank with barycenter sweeps, keeping the ordering with the
   fewest crossings,
5. place nodes along each rank using their real size and along the rank
   axis using the thickest node of every rank,
6. rotate/mirror for the requested direction and shift into the margins.

Nothing is random and nothing is cached between calls.
"""

import dataclasses
import logging
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import networkx as nx

from ddl_flow_core.config import DEFAULT_LAYOUT_CONFIG, LayoutConfig, is_vertical, validate_direction
from ddl_flow_core.flow import FlowEdge, FlowNode, Position, build_flow
from ddl_flow_core.model import SchemaGraph

logger = logging.getLogger(__name__)

Layers = List[List[Hashable]]


def node_size(node: FlowNode, config: LayoutConfig = DEFAULT_LAYOUT_CONFIG) -> Tuple[float, float]:
    return config.node_width, config.node_height(len(node.data.columns))


def _build_graph(nodes: Sequence[FlowNode], edges: Sequence[FlowEdge]) -> nx.DiGraph:
    graph = nx.DiGraph()
    index: Dict[str, int] = {}
    for idx, node in enumerate(nodes):
        graph.add_node(idx)
        index.setdefault(node.id, idx)
    for edge in edges:
        source = index.get(edge.source)
        target = index.get(edge.target)
        if source is None or target is None or source == target:
            continue
        graph.add_edge(source, target)
    return graph


def _back_edges(graph: nx.DiGraph) -> set:
    visited = set()
    on_stack = set()
    back = set()
    for start in graph.nodes:
        if start in visited:
            continue
        visited.add(start)
        on_stack.add(start)
        stack = [(start, iter(graph.successors(start)))]
        while stack:
            node, successors = stack[-1]
            for succ in successors:
                if succ in on_stack:
                    back.add((node, succ))
                elif succ not in visited:
                    visited.add(succ)
                    on_stack.add(succ)
                    stack.append((succ, iter(graph.successors(succ))))
                    break
            else:
                on_stack.discard(node)
                stack.pop()
    return back


def make_acyclic(graph: nx.DiGraph) -> nx.DiGraph:
    back = _back_edges(graph)
    dag = nx.DiGraph()
    dag.add_nodes_from(graph.nodes)
    for source, target in graph.edges:
        if (source, target) in back:
            dag.add_edge(target, source)
        else:
            dag.add_edge(source, target)
    return dag


def assign_ranks(dag: nx.DiGraph) -> Dict[Hashable, int]:
    ranks: Dict[Hashable, int] = {}
    for node in nx.topological_sort(dag):
        preds = list(dag.predecessors(node))
        ranks[node] = max(ranks[pred] + 1 for pred in preds) if preds else 0

    for node in dag.nodes:
        succs = list(dag.successors(node))
        if not list(dag.predecessors(node)) and succs:
            ranks[node] = min(ranks[succ] for succ in succs) - 1
    return ranks


def insert_dummies(dag: nx.DiGraph, ranks: Dict[Hashable, int]) -> Tuple[nx.DiGraph, Dict[Hashable, int]]:
    layered = nx.DiGraph()
    layered.add_nodes_from(dag.nodes)
    layered_ranks = dict(ranks)
    for source, target in dag.edges:
        span = ranks[target] - ranks[source]
        prev = source
        for step in range(1, span):
            dummy = ("dummy", source, target, step)
            layered.add_node(dummy)
            layered_ranks[dummy] = ranks[source] + step
            layered.add_edge(prev, dummy)
            prev = dummy
        layered.add_edge(prev, target)
    return layered, layered_ranks


def initial_layers(layered: nx.DiGraph, ranks: Dict[Hashable, int]) -> Layers:
    """Group nodes by rank in DFS visit order, starting from the lowest ranks."""
    depth = max(ranks.values(), default=-1) + 1
    layers: Layers = [[] for _ in range(depth)]
    visited = set()
    roots = sorted(layered.nodes, key=lambda node: ranks[node])
    for root in roots:
        if root in visited:
            continue
        stack = [root]
        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            layers[ranks[node]].append(node)
            stack.extend(reversed(list(layered.successors(node))))
    return layers


def count_crossings(layered: nx.DiGraph, layers: Layers) -> int:
    total = 0
    for upper, lower in zip(layers, layers[1:]):
        lower_pos = {node: idx for idx, node in enumerate(lower)}
        segments = []
        for idx, node in enumerate(upper):
            for succ in layered.successors(node):
                if succ in lower_pos:
                    segments.append((idx, lower_pos[succ]))
        for i, (a_top, a_bottom) in enumerate(segments):
            for b_top, b_bottom in segments[i + 1:]:
                if (a_top - b_top) * (a_bottom - b_bottom) < 0:
                    total += 1
    return total


def _reorder(layer: List[Hashable], fixed: List[Hashable], neighbours) -> List[Hashable]:
    fixed_pos = {node: idx for idx, node in enumerate(fixed)}
    keyed = []
    for idx, node in enumerate(layer):
        positions = [fixed_pos[other] for other in neighbours(node) if other in fixed_pos]
        barycenter = sum(positions) / len(positions) if positions else float(idx)
        keyed.append((barycenter, idx, node))
    keyed.sort(key=lambda item: (item[0], item[1]))
    return [node for _, _, node in keyed]


def order_layers(layered: nx.DiGraph, layers: Layers, iterations: int) -> Layers:
    best = [list(layer) for layer in layers]
    best_crossings = count_crossings(layered, best)
    current = [list(layer) for layer in best]

    for iteration in range(iterations):
        if best_crossings == 0:
            break
        if iteration % 2 == 0:
            for idx in range(1, len(current)):
                current[idx] = _reorder(current[idx], current[idx - 1], layered.predecessors)
        else:
            for idx in range(len(current) - 2, -1, -1):
                current[idx] = _reorder(current[idx], current[idx + 1], layered.successors)
        crossings = count_crossings(layered, current)
        if crossings < best_crossings:
            best = [list(layer) for layer in current]
            best_crossings = crossings

    logger.debug("Layer ordering settled at %d crossings", best_crossings)
    return best


def _is_dummy(node: Hashable) -> bool:
    return isinstance(node, tuple)


def _pack(order: List[Hashable], desired: List[Optional[float]], gaps: List[float]) -> List[float]:
    """Left-to-right placement honouring ``desired`` centres and minimum ``gaps``."""
    placed: List[float] = []
    for idx in range(len(order)):
        if idx == 0:
            want = desired[0]
            if want is None:
                want = 0.0
                offset = 0.0
                for ahead in range(1, len(order)):
                    offset += gaps[ahead]
                    if desired[ahead] is not None:
                        want = desired[ahead] - offset
                        break
            placed.append(want)
            continue
        floor = placed[-1] + gaps[idx]
        want = desired[idx]
        placed.append(floor if want is None else max(want, floor))
    return placed


def _place_layer(order: List[Hashable], desired: List[Optional[float]], gaps: List[float]) -> List[float]:
    forward = _pack(order, desired, gaps)
    mirrored_desired = [None if want is None else -want for want in reversed(desired)]
    mirrored_gaps = [0.0] + list(reversed(gaps[1:]))
    backward = [-pos for pos in reversed(_pack(list(reversed(order)), mirrored_desired, mirrored_gaps))]
    return [(a + b) / 2 for a, b in zip(forward, backward)]


def assign_cross_positions(
    layered: nx.DiGraph,
    layers: Layers,
    cross_size: Dict[Hashable, float],
    nodesep: float,
    edgesep: float,
) -> Dict[Hashable, float]:
    def gap(left: Hashable, right: Hashable) -> float:
        dummies = _is_dummy(left) + _is_dummy(right)
        sep = (nodesep, (nodesep + edgesep) / 2, edgesep)[dummies]
        return (cross_size[left] + cross_size[right]) / 2 + sep

    gaps_by_layer = [[0.0] + [gap(a, b) for a, b in zip(layer, layer[1:])] for layer in layers]
    centre: Dict[Hashable, float] = {}
    for layer, gaps in zip(layers, gaps_by_layer):
        for node, pos in zip(layer, _place_layer(layer, [None] * len(layer), gaps)):
            centre[node] = pos

    def sweep(indices, neighbours) -> None:
        for idx in indices:
            desired: List[Optional[float]] = []
            for node in layers[idx]:
                linked = [centre[other] for other in neighbours(node)]
                desired.append(sum(linked) / len(linked) if linked else centre[node])
            for node, pos in zip(layers[idx], _place_layer(layers[idx], desired, gaps_by_layer[idx])):
                centre[node] = pos

    sweep(range(1, len(layers)), layered.predecessors)
    sweep(range(len(layers) - 2, -1, -1), layered.successors)
    sweep(range(1, len(layers)), layered.predecessors)
    return centre


def layout(
    nodes: Sequence[FlowNode],
    edges: Sequence[FlowEdge],
    direction: str = "LR",
    config: Optional[LayoutConfig] = None,
) -> Tuple[List[FlowNode], List[FlowEdge]]:
    """Return copies of ``nodes`` with top-left positions and sizes filled in.

    ``direction`` is one of LR, TB, RL, BT. Edges are returned unchanged;
    edges whose endpoints are not among ``nodes`` do not influence placement.
    """
    direction = validate_direction(direction)
    config = config or DEFAULT_LAYOUT_CONFIG
    if not nodes:
        return [], list(edges)

    vertical = is_vertical(direction)
    sizes = [node_size(node, config) for node in nodes]

    dag = make_acyclic(_build_graph(nodes, edges))
    layered, layered_ranks = insert_dummies(dag, assign_ranks(dag))
    layers = order_layers(layered, initial_layers(layered, layered_ranks), config.order_iterations)

    # Cross axis runs along a rank; the rank axis runs between ranks.
    cross_size: Dict[Hashable, float] = {}
    rank_size: Dict[Hashable, float] = {}
    for node in layered.nodes:
        if _is_dummy(node):
            cross_size[node] = 0.0
            rank_size[node] = 0.0
        else:
            width, height = sizes[node]
            cross_size[node] = width if vertical else height
            rank_size[node] = height if vertical else width

    centre = assign_cross_positions(
        layered, layers, cross_size, config.nodesep(direction), config.edgesep
    )

    ranksep = config.ranksep(direction)
    rank_start: List[float] = []
    cursor = 0.0
    for layer in layers:
        thickness = max((rank_size[node] for node in layer), default=0.0)
        rank_start.append(cursor + thickness / 2)
        cursor += thickness + ranksep
    extent = cursor - ranksep

    boxes: List[Tuple[float, float]] = []
    for idx, (width, height) in enumerate(sizes):
        along = rank_start[layered_ranks[idx]]
        if direction in ("RL", "BT"):
            along = extent - along
        across = centre[idx]
        if vertical:
            boxes.append((across - width / 2, along - height / 2))
        else:
            boxes.append((along - width / 2, across - height / 2))

    shift_x = config.marginx - min(x for x, _ in boxes)
    shift_y = config.marginy - min(y for _, y in boxes)

    placed = [
        dataclasses.replace(
            node,
            position=Position(x=x + shift_x, y=y + shift_y),
            width=width,
            height=height,
        )
        for node, (x, y), (width, height) in zip(nodes, boxes, sizes)
    ]
    logger.debug("Laid out %d nodes in %d ranks (%s)", len(placed), len(layers), direction)
    return placed, list(edges)


def layout_graph(
    graph: SchemaGraph,
    direction: str = "LR",
    config: Optional[LayoutConfig] = None,
) -> Tuple[List[FlowNode], List[FlowEdge]]:
    nodes, edges = build_flow(graph)
    return layout(nodes, edges, direction=direction, config=config)
