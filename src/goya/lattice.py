from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple
from .types import BestPath, BestWord, LatticeNode, WordIdentifier
from .dict.connection import ConnectionCostMatrix

if TYPE_CHECKING:
    from .dictionary import Dictionary
    from .viterbi import ViterbiResult

BOS = 0
EOS = 1
BOLD = " penwidth=3"


def _escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')


@dataclass
class Lattice:
    """
    arena of nodes over character offsets. begins[i] / ends[i] hold indices of
    nodes starting / ending at i; two nodes connect iff one ends where the
    other begins. nodes[0] is BOS, nodes[1] is EOS
    """
    text: str
    conn: ConnectionCostMatrix
    nodes: List[LatticeNode]
    begins: List[List[int]]
    ends: List[List[int]]
    _result: Optional["ViterbiResult"] = field(default=None, repr=False)

    @classmethod
    def build(cls, text: str, dictionary: "Dictionary") -> "Lattice":
        n = len(text)
        conn = dictionary.matrix
        vocab = dictionary.vocabulary
        bos_id, eos_id = conn.bos_right_id(), conn.eos_left_id()
        nodes: List[LatticeNode] = [
            LatticeNode(0, 0, None, bos_id, bos_id, 0),
            LatticeNode(n, n, None, eos_id, eos_id, 0),
        ]
        begins: List[List[int]] = [[] for _ in range(n + 1)]
        ends: List[List[int]] = [[] for _ in range(n + 1)]
        ends[0].append(BOS)
        begins[n].append(EOS)

        def add(node: LatticeNode) -> None:
            begins[node.start].append(len(nodes))
            ends[node.end].append(len(nodes))
            nodes.append(node)

        for i in range(n):
            known = sorted(dictionary.lookup(text, i))
            for end, wid in known:
                e = vocab.entry(wid)
                add(LatticeNode(i, end, WordIdentifier(wid, e.surface_form, True),
                                e.left_context_id, e.right_context_id, e.cost))
            for end, unk_id in dictionary.unknown.candidates(text, i, has_known=bool(known)):
                e = vocab.unknown_entry(unk_id)
                add(LatticeNode(i, end, WordIdentifier(unk_id, text[i:end], False),
                                e.left_context_id, e.right_context_id, e.cost))
        return cls(text=text, conn=conn, nodes=nodes, begins=begins, ends=ends)

    def candidates_from(self, start: int) -> List[LatticeNode]:
        if start < 0 or start >= len(self.begins):
            return []
        return [self.nodes[i] for i in self.begins[start]]

    def edges(self) -> Iterator[Tuple[int, int, int]]:
        """every structurally connectable pair (left, right, connection cost)"""
        for i in range(len(self.begins)):
            for p in self.ends[i]:
                left = self.nodes[p]
                for q in self.begins[i]:
                    yield p, q, self.conn.cost(left.right_id, self.nodes[q].left_id)

    def search(self) -> "ViterbiResult":
        if self._result is None:
            from .viterbi import viterbi_search
            self._result = viterbi_search(self)
        return self._result

    @property
    def best_path(self) -> BestPath:
        return self.search().path

    @property
    def total_cost(self) -> int:
        return self.best_path.total_cost

    def best_nodes(self) -> List[LatticeNode]:
        return [self.nodes[i] for i in self.best_path.nodes if i not in (BOS, EOS)]

    def find_best(self) -> List[WordIdentifier]:
        return [node.wid for node in self.best_nodes() if node.wid is not None]

    def best_words(self) -> List[BestWord]:
        out: List[BestWord] = []
        for node in self.best_nodes():
            if node.wid is None:
                continue
            out.append(BestWord(
                word_id=node.wid.id,
                surface_form=node.wid.surface,
                start_offset=node.start,
                end_offset=node.end,
                is_known=node.wid.known,
                left_context_id=node.left_id,
                right_context_id=node.right_id,
                cost=node.cost,
            ))
        return out

    def wakachi(self) -> List[str]:
        return [node.surface for node in self.best_nodes()]

    def _dot_id(self, idx: int) -> str:
        if idx == BOS:
            return "BOS"
        if idx == EOS:
            return "EOS"
        node = self.nodes[idx]
        return f'"{node.start}_{self.begins[node.start].index(idx)}"'

    def as_dot(self) -> str:
        """graphviz digraph of the whole lattice, best path in bold"""
        result = self.search()
        on_path = set(result.path.nodes)
        path_edges = set(zip(result.path.nodes, result.path.nodes[1:]))

        def cum(idx: int) -> str:
            c = result.costs[idx]
            return str(c) if c is not None else "inf"

        lines = [
            "digraph lattice {",
            "  rankdir=LR;",
            "  splines=polyline;",
            "  nodesep=.05;",
            f'  BOS [label="BOS\\n0 (0)" shape="doublecircle"{BOLD}];',
            f'  EOS [label="EOS\\n{cum(EOS)} (0)" shape="doublecircle"{BOLD}];',
        ]
        for idx in range(2, len(self.nodes)):
            node = self.nodes[idx]
            style = BOLD if idx in on_path else ""
            lines.append(
                f'  {self._dot_id(idx)} [label="{_escape(node.surface)}\\n({cum(idx)}, {node.cost})"{style}];'
            )
        for p, q, cost in self.edges():
            style = BOLD if (p, q) in path_edges else ""
            lines.append(f'  {self._dot_id(p)} -> {self._dot_id(q)} [label="({cost})"{style}];')
        lines.append("}")
        return "\n".join(lines) + "\n"

    as_graph_description = as_dot


def parse(text: str, dictionary: "Dictionary") -> Lattice:
    lattice = Lattice.build(text, dictionary)
    lattice.search()
    return lattice
