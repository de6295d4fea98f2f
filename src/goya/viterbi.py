from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional
from .errors import NoPathError
from .lattice import BOS, EOS, Lattice
from .types import BestPath

logger = logging.getLogger(__name__)

INF = 10**18


@dataclass
class ViterbiResult:
    path: BestPath
    # cumulative best cost per lattice node, None when unreachable
    costs: List[Optional[int]]
    prev: List[int]


def viterbi_search(lattice: Lattice) -> ViterbiResult:
    """
    forward dp over offsets. cost(node) = min over nodes ending at node.start
    of cost(pred) + conn(pred.right_id, node.left_id), plus node.cost.

    predecessors are scanned in arena order (by start, known before unknown,
    then word id) and only a strictly lower cost replaces the current best,
    so ties go to the first of them
    """
    conn = lattice.conn
    nodes = lattice.nodes
    n = len(lattice.text)
    best_cost: List[int] = [INF] * len(nodes)
    best_prev: List[int] = [-1] * len(nodes)
    best_cost[BOS] = 0

    for i in range(n + 1):
        preds = [p for p in lattice.ends[i] if best_cost[p] < INF]
        if not preds:
            continue
        for idx in lattice.begins[i]:
            node = nodes[idx]
            best = INF
            best_prev_idx = -1
            for pidx in preds:
                cand = best_cost[pidx] + conn.cost(nodes[pidx].right_id, node.left_id)
                if cand < best:
                    best = cand
                    best_prev_idx = pidx
            best_cost[idx] = best + node.cost
            best_prev[idx] = best_prev_idx

    if best_cost[EOS] >= INF:
        offset = next(
            (i for i in range(n + 1) if not any(best_cost[p] < INF for p in lattice.ends[i])),
            n,
        )
        logger.error("lattice has no path at offset %d of %r; unknown word model left a gap", offset, lattice.text)
        raise NoPathError(lattice.text, offset)

    # reconstruct best path
    rev: List[int] = []
    cur = EOS
    while cur != -1:
        rev.append(cur)
        cur = best_prev[cur]
    rev.reverse()

    costs: List[Optional[int]] = [c if c < INF else None for c in best_cost]
    return ViterbiResult(BestPath(tuple(rev), int(best_cost[EOS])), costs, best_prev)
