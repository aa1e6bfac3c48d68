# Version 4
#
# Decides whether a small digraph (at most 32 vertices) is a DAG.
#   - Out-edges of each vertex are a 32-bit mask (bit i set = edge to vertex i).
#   - Default detector: depth-first exploration with a reachability table that is
#     shared across top-level vertices ("dfs").
#   - Alternative detector: per-vertex frontier expansion, nothing shared ("bfs").
#   - --validate runs both and reports any disagreement.
#   - --json emits a single JSON object on stdout, for failures too.

import sys
import re
import time
import argparse
from collections import deque
from collections.abc import Mapping

import os
import socket
import platform
import hashlib
import datetime
import json


TOOL_NAME = "Dag_Master"
SCHEMA_VERSION = "1.0"

MASK_WIDTH = 32
FULL_MASK = (1 << MASK_WIDTH) - 1


# ----------------------------
# Errors
# ----------------------------
class ToolExit(Exception):
    """Structured termination with an exit code and JSON-friendly fields."""
    def __init__(self, exit_code: int, error_code: str, message: str, details: dict | None = None):
        super().__init__(message)
        self.exit_code = int(exit_code)
        self.error_code = str(error_code)
        self.message = str(message)
        self.details = details or {}


class InvalidSize(ToolExit, ValueError):
    """Vertex count outside [1, 32]."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(1, "INVALID_SIZE", message, details)


class InvalidEdge(ToolExit, ValueError):
    """Edge mask with a bit at or beyond the vertex count (or not a 32-bit mask at all)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(1, "INVALID_EDGE", message, details)


class LoadFailure(ToolExit):
    """The graph file could not be turned into a BitsetGraph."""
    def __init__(self, error_code: str, message: str, details: dict | None = None):
        super().__init__(1, error_code, message, details)


# ----------------------------
# Bit helpers (32-bit masks)
# ----------------------------
def bit(i):
    return 1 << i


def has_bit(mask, i):
    return (mask >> i) & 1 == 1


def set_bit(mask, i):
    return (mask | (1 << i)) & FULL_MASK


def clear_bit(mask, i):
    return mask & ~(1 << i) & FULL_MASK


def union(a, b):
    return (a | b) & FULL_MASK


def difference(a, b):
    """Bits of a that are not in b."""
    return a & ~b & FULL_MASK


def range_mask(n):
    """Mask with bits 0..n-1 set."""
    return (1 << n) - 1


def iter_bits(mask):
    """Yield the positions of the set bits, lowest first."""
    i = 0
    while mask:
        if mask & 1:
            yield i
        mask >>= 1
        i += 1


def mask_to_str(mask, width=MASK_WIDTH):
    # vertex 0 is the rightmost digit, like the literal 0b... in a graph file
    return format(mask, f"0{width}b")


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def check_vertex_count(n_vertices):
    if not _is_int(n_vertices):
        raise InvalidSize(
            f"Vertex count must be an integer, got {n_vertices!r}.",
            details={"n_vertices": repr(n_vertices)},
        )
    if n_vertices < 1 or n_vertices > MASK_WIDTH:
        raise InvalidSize(
            f"Vertex count {n_vertices} is outside [1, {MASK_WIDTH}].",
            details={"n_vertices": n_vertices, "max_vertices": MASK_WIDTH},
        )
    return n_vertices


# ----------------------------
# Graph representation
# ----------------------------
class BitsetGraph:
    """Digraph of at most 32 vertices, one out-edge mask per vertex.

    Built once and never mutated: `edges` is a tuple and attributes cannot be
    reassigned after construction. Bits at positions >= n_vertices are rejected.
    """

    __slots__ = ("_n_vertices", "_edges")

    def __init__(self, n_vertices, edges):
        n = check_vertex_count(n_vertices)

        if isinstance(edges, Mapping):
            masks = [0] * n
            for v, mask in edges.items():
                if not _is_int(v) or v < 0 or v >= n:
                    raise InvalidEdge(
                        f"Edge mask given for vertex {v!r}, valid vertices are 0..{n - 1}.",
                        details={"vertex": repr(v), "n_vertices": n},
                    )
                masks[v] = mask
        else:
            masks = list(edges)
            if len(masks) != n:
                raise InvalidEdge(
                    f"Expected {n} edge masks, got {len(masks)}.",
                    details={"n_vertices": n, "mask_count": len(masks)},
                )

        allowed = range_mask(n)
        for v, mask in enumerate(masks):
            if not _is_int(mask) or mask < 0 or mask > FULL_MASK:
                raise InvalidEdge(
                    f"Edge mask of vertex {v} is not a 32-bit unsigned integer: {mask!r}.",
                    details={"vertex": v, "mask": repr(mask)},
                )
            if mask & ~allowed:
                stray = [w for w in iter_bits(mask & ~allowed)]
                raise InvalidEdge(
                    f"Vertex {v} has edges to {stray}, but the graph only has vertices 0..{n - 1}.",
                    details={"vertex": v, "mask": mask, "out_of_range": stray, "n_vertices": n},
                )

        object.__setattr__(self, "_n_vertices", n)
        object.__setattr__(self, "_edges", tuple(masks))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def from_edge_list(cls, n_vertices, pairs):
        n = check_vertex_count(n_vertices)
        masks = [0] * n
        for pair in pairs:
            try:
                u, v = pair
            except (TypeError, ValueError):
                raise InvalidEdge(
                    f"Edge {pair!r} is not a (source, target) pair.",
                    details={"edge": repr(pair), "n_vertices": n},
                ) from None
            for x in (u, v):
                if not _is_int(x) or x < 0 or x >= n:
                    raise InvalidEdge(
                        f"Edge ({u!r}, {v!r}) names a vertex outside 0..{n - 1}.",
                        details={"edge": [repr(u), repr(v)], "n_vertices": n},
                    )
            masks[u] = set_bit(masks[u], v)
        return cls(n, masks)

    @property
    def n_vertices(self):
        return self._n_vertices

    @property
    def edges(self):
        return self._edges

    def successors(self, v):
        return list(iter_bits(self._edges[v]))

    def has_edge(self, v, w):
        return has_bit(self._edges[v], w)

    def has_self_loop(self, v):
        return has_bit(self._edges[v], v)

    def edge_count(self):
        return sum(bin(mask).count("1") for mask in self._edges)

    def __len__(self):
        return self._n_vertices

    def __eq__(self, other):
        if not isinstance(other, BitsetGraph):
            return NotImplemented
        return self._n_vertices == other._n_vertices and self._edges == other._edges

    def __hash__(self):
        return hash((self._n_vertices, self._edges))

    def __repr__(self):
        masks = ", ".join(bin(m) for m in self._edges)
        return f"BitsetGraph({self._n_vertices}, [{masks}])"


# ----------------------------
# Detector: DFS with shared reachability table
# ----------------------------
class TraversalContext:
    """Mutable state of one is_dag() call.

    gray      frontier: vertices discovered but not yet expanded
    black     vertices expanded during the current top-level pass
    map_dest  map_dest[v] = vertices known reachable from v (only ever grows);
              map_dest[n] = vertices whose entry is complete (never recomputed)
    """

    def __init__(self, graph: BitsetGraph):
        self.graph = graph
        self.n_vertices = graph.n_vertices
        self.gray = 0
        self.black = 0
        self.map_dest = list(graph.edges) + [0]

    @property
    def explored(self):
        return self.map_dest[self.n_vertices]

    def reset_pass(self):
        self.gray = 0
        self.black = 0


class MemoizedDfsDetector:
    name = "dfs"

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

        # Per-call statistics (reset by every is_dag call)
        self.explore_calls = 0
        self.memo_skips = 0
        self.max_depth = 0

        # Traversal state of the last is_dag call, kept for inspection
        self.last_context = None

    def stats(self):
        return {
            "explore_calls": self.explore_calls,
            "memo_skips": self.memo_skips,
            "max_depth": self.max_depth,
        }

    def is_dag(self, graph: BitsetGraph) -> bool:
        """Return True iff no vertex can reach itself.

        Every vertex is a top-level root, in increasing order. The reachability
        table survives from one root to the next, so a vertex explored under an
        earlier root is not explored again. Detection stops at the first vertex
        found to reach itself, leaving the table incomplete.
        """
        ctx = TraversalContext(graph)
        self.last_context = ctx
        self.explore_calls = 0
        self.memo_skips = 0
        self.max_depth = 0

        if self.verbose:
            print(f"[INFO] Using memoized DFS detector (vertices={ctx.n_vertices})", file=sys.stderr)

        for v in range(ctx.n_vertices):
            # self-loop, or a cycle through v already recorded by an earlier root
            if has_bit(ctx.map_dest[v], v):
                if self.verbose:
                    print(f"[DFS] vertex {v} reaches itself before exploration", file=sys.stderr)
                return False

            ctx.reset_pass()
            self._explore(ctx, v, 1)

            if self.verbose:
                print(f"[DFS] root={v} reach={mask_to_str(ctx.map_dest[v], ctx.n_vertices)} "
                      f"calls={self.explore_calls} skips={self.memo_skips}", file=sys.stderr)

            if has_bit(ctx.map_dest[v], v):
                if self.verbose:
                    print(f"[DFS] cycle through vertex {v}", file=sys.stderr)
                return False

        return True

    def _explore(self, ctx: TraversalContext, current: int, depth: int):
        n = ctx.n_vertices
        edges = ctx.graph.edges

        if has_bit(ctx.map_dest[n], current):
            self.memo_skips += 1
            return

        self.explore_calls += 1
        if depth > self.max_depth:
            self.max_depth = depth

        ctx.black = set_bit(ctx.black, current)
        ctx.gray = clear_bit(union(ctx.gray, edges[current]), current)
        ctx.map_dest[current] = union(ctx.map_dest[current], edges[current])

        # gray is re-read on every step: deeper calls expand and clear entries.
        # Only current's own successors count; other gray entries belong to
        # sibling branches and are not reachable from current.
        for vv in iter_bits(edges[current]):
            if not has_bit(ctx.gray, vv):
                continue

            if has_bit(ctx.black, vv):
                # re-convergence on a vertex already expanded in this pass
                ctx.map_dest[current] = set_bit(ctx.map_dest[current], vv)
                ctx.gray = clear_bit(ctx.gray, current)
            else:
                self._explore(ctx, vv, depth + 1)

            if has_bit(ctx.map_dest[current], vv):
                ctx.map_dest[current] = union(ctx.map_dest[current], ctx.map_dest[vv])

        ctx.map_dest[n] = set_bit(ctx.map_dest[n], current)


# ----------------------------
# Detector: per-vertex frontier expansion
# ----------------------------
class FrontierBfsDetector:
    name = "bfs"

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.expansions = 0

    def stats(self):
        return {"expansions": self.expansions}

    def is_dag(self, graph: BitsetGraph) -> bool:
        """Return True iff no vertex can reach itself.

        Each vertex's reachable set is computed from scratch; nothing is shared
        between top-level vertices.
        """
        self.expansions = 0
        edges = graph.edges

        if self.verbose:
            print(f"[INFO] Using frontier BFS detector (vertices={graph.n_vertices})", file=sys.stderr)

        for v in range(graph.n_vertices):
            if graph.has_self_loop(v):
                if self.verbose:
                    print(f"[BFS] self-loop on vertex {v}", file=sys.stderr)
                return False

            current_map = self._reachable_from(edges, v)

            if self.verbose:
                print(f"[BFS] root={v} reach={mask_to_str(current_map, graph.n_vertices)} "
                      f"expansions={self.expansions}", file=sys.stderr)

            if has_bit(current_map, v):
                if self.verbose:
                    print(f"[BFS] cycle through vertex {v}", file=sys.stderr)
                return False

        return True

    def _reachable_from(self, edges, v):
        gray = edges[v]
        black = 0
        current_map = edges[v]
        queue = deque(iter_bits(gray))

        while queue:
            u = queue.popleft()
            if has_bit(black, u):
                continue
            black = set_bit(black, u)
            gray = clear_bit(gray, u)
            self.expansions += 1

            current_map = union(current_map, edges[u])
            for w in iter_bits(difference(edges[u], black)):
                if not has_bit(gray, w):
                    gray = set_bit(gray, w)
                    queue.append(w)

        return current_map


DETECTORS = {
    MemoizedDfsDetector.name: MemoizedDfsDetector,
    FrontierBfsDetector.name: FrontierBfsDetector,
}


def is_dag(graph: BitsetGraph, algorithm: str = "dfs", verbose: bool = False) -> bool:
    try:
        detector_cls = DETECTORS[algorithm]
    except KeyError:
        raise ValueError(f"Unknown algorithm {algorithm!r}; choose from {sorted(DETECTORS)}") from None
    return detector_cls(verbose=verbose).is_dag(graph)


def cross_validate(graph: BitsetGraph, verbose: bool = False):
    """Run both detectors on the same graph and return (dfs_result, bfs_result)."""
    return (
        MemoizedDfsDetector(verbose=verbose).is_dag(graph),
        FrontierBfsDetector(verbose=verbose).is_dag(graph),
    )


# ----------------------------
# FILE PARSING / DEBUG PRINTING
# ----------------------------
def read_graph(filename, verbose: bool = False) -> BitsetGraph:
    """Load a graph file: a vertex count followed by one out-edge mask per vertex.

    Blank lines and '#' comments are ignored. Values are Python int literals
    (decimal, 0x.., 0b.., 0o..).
    """
    try:
        with open(filename, "r", encoding="utf-8") as file:
            lines = file.read().splitlines()
    except FileNotFoundError:
        raise LoadFailure(
            "INPUT_NOT_FOUND",
            f"File '{filename}' not found.",
            details={"path": str(filename)},
        )
    except (OSError, UnicodeDecodeError) as e:
        raise LoadFailure(
            "INPUT_UNREADABLE",
            f"File '{filename}' could not be read: {e}",
            details={"path": str(filename), "exception_type": type(e).__name__},
        )

    values = []
    for lineno, raw in enumerate(lines, 1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        parts = line.split()
        if len(parts) > 1:
            raise LoadFailure(
                "INPUT_INVALID",
                f"Line {lineno} '{raw.strip()}' has more than one value. Expected one integer per line.",
                details={"path": str(filename), "line": lineno},
            )
        try:
            values.append(int(parts[0], 0))
        except ValueError:
            raise LoadFailure(
                "INPUT_INVALID",
                f"Line {lineno} '{parts[0]}' is not an integer literal.",
                details={"path": str(filename), "line": lineno},
            )

    if not values:
        raise LoadFailure(
            "INPUT_EMPTY",
            "Input file is empty or contains only whitespace and comments.",
            details={"path": str(filename)},
        )

    n_vertices = check_vertex_count(values[0])
    masks = values[1:]
    if len(masks) != n_vertices:
        raise LoadFailure(
            "INPUT_INVALID",
            f"Vertex count is {n_vertices} but {len(masks)} edge masks follow.",
            details={"path": str(filename), "n_vertices": n_vertices, "mask_count": len(masks)},
        )

    graph = BitsetGraph(n_vertices, masks)

    if verbose:
        print(f"[INFO] Parsed digraph: vertices={graph.n_vertices}, edges={graph.edge_count()}, "
              f"file={filename}", file=sys.stderr)

    return graph


def format_graph(graph: BitsetGraph) -> str:
    lines = [f"digraph: {graph.n_vertices} vertices, {graph.edge_count()} edges"]
    for v, mask in enumerate(graph.edges):
        succ = ", ".join(str(w) for w in iter_bits(mask))
        lines.append(f"  {v:2d}: {mask_to_str(mask, graph.n_vertices)} -> [{succ}]")
    return "\n".join(lines)


def print_graph(graph: BitsetGraph, file=None):
    print(format_graph(graph), file=file if file is not None else sys.stderr)


# ----------------------------
# JSON output
# ----------------------------
def _sha256_file(path):
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def _input_digest(filename):
    # The file is read a second time; it may have vanished since read_graph.
    try:
        return _sha256_file(filename)
    except OSError as e:
        raise LoadFailure(
            "INPUT_UNREADABLE",
            f"Input file could not be hashed: {filename}",
            details={"os_error": str(e)},
        ) from e


def _utc_timestamp():
    # ISO 8601 UTC with microseconds
    return datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z")


def _run_id():
    # timestamp::pid
    return f"{_utc_timestamp()}::pid{os.getpid()}"


def _relpath(p):
    try:
        return os.path.relpath(p).replace("\\", "/")
    except ValueError:
        return str(p).replace("\\", "/")


def _extract_version_number():
    # Reads the leading "# Version NN" line at top of file.
    try:
        with open(__file__, "r", encoding="utf-8") as f:
            first = f.readline().strip()
    except OSError:
        return None
    m = re.search(r"Version\s+(\d+)", first)
    return int(m.group(1)) if m else None


def _emit_json(payload: dict) -> None:
    """Emit exactly one JSON object to stdout."""
    sys.stdout.write(json.dumps(payload, indent=2))
    sys.stdout.write("\n")
    sys.stdout.flush()


def _error_dict(err: ToolExit, filename=None) -> dict:
    return {
        "code": err.error_code,
        "message": err.message,
        "file_path": filename,
        "details": err.details,
    }


def make_json_payload(argv, args, graphs, exit_code, status, message, elapsed_seconds, error=None):
    payload = {
        "schema_version": SCHEMA_VERSION,
        "tool": {
            "name": TOOL_NAME,
            "version": _extract_version_number(),
            "source_file": _relpath(__file__),
        },
        "run": {
            "run_id": _run_id(),
            "timestamp_utc": _utc_timestamp(),
            "host": socket.gethostname(),
            "platform": platform.platform(),
        },
        "options": {
            "argv": list(argv),
            "algorithm": ("both" if getattr(args, "validate", False) else getattr(args, "algorithm", None)),
            "validate": bool(getattr(args, "validate", False)),
            "verbose": bool(getattr(args, "verbose", False)),
            "time_enabled": bool(getattr(args, "time", False)),
            "json_enabled": True,
        },
        "results": {
            "summary": {
                "exit_code": exit_code,
                "status": status,
                "message": message,
                "graphs_processed": len(graphs),
            },
            "graphs": graphs,
        },
        "performance": {
            "elapsed_seconds": elapsed_seconds,
            "elapsed_nanoseconds": int(elapsed_seconds * 1_000_000_000) if elapsed_seconds is not None else None,
        },
    }
    if error is not None:
        payload["results"]["error"] = error
    return payload


# ----------------------------
# CLI
# ----------------------------
USAGE = "Usage: is_dag <digraph file>+"

HELP_EPILOG = """
IS_DAG(1)                   User Commands                   IS_DAG(1)

NAME
    is_dag — decide whether small directed graphs are acyclic

SYNOPSIS
    is_dag [OPTIONS] FILE [FILE ...]

DESCRIPTION
    For every FILE, in order, prints one line:

        FILE is a dag? 1        (acyclic)
        FILE is a dag? 0        (contains a cycle, self-loops included)

    Input format:
        - First value: number of vertices (1..32)
        - Then one value per vertex: its out-edge bit mask, bit i set meaning
          an edge to vertex i (e.g. 0b110 = edges to vertices 1 and 2)
        - Values may be decimal, 0x.., 0b.. or 0o.. literals, one per line
        - Blank lines and '#' comments are ignored

ALGORITHMS
    -a dfs (default):
        Depth-first exploration with a reachability table shared across
        top-level vertices; each vertex is fully explored at most once.

    -a bfs:
        Frontier expansion from every vertex, nothing shared between vertices.

VALIDATION
    --validate
        Runs both algorithms on every graph and fails when they disagree.

JSON OUTPUT
    --json
        Emit a single JSON object to stdout (schema_version 1.0). Human-readable
        output is suppressed; traces still go to stderr.

DIAGNOSTICS
    -v, --verbose       Trace parsing and traversal on stderr
    -t, --time          Print elapsed execution time
    --print-graph       Dump each parsed graph on stderr

EXIT STATUS
    0   Every file was read (and, with --validate, both algorithms agreed).

    1   Usage error, a file could not be read (remaining files are skipped),
        or --validate found a disagreement.

    130 Interrupted by user (Ctrl+C / SIGINT).
"""


def build_parser():
    parser = argparse.ArgumentParser(
        prog="is_dag",
        description="Decide whether each directed graph (at most 32 vertices) is acyclic.",
        epilog=HELP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("files", nargs="*", metavar="FILE", help="Digraph file(s) to check")
    parser.add_argument("-a", "--algorithm", choices=sorted(DETECTORS), default="dfs",
                        help="Cycle detector to run (default: dfs)")
    parser.add_argument("--validate", action="store_true",
                        help="Run both detectors and fail on any disagreement")
    parser.add_argument("--json", action="store_true",
                        help="Emit machine-readable JSON (schema_version 1.0) to stdout")
    parser.add_argument("--print-graph", action="store_true",
                        help="Print each parsed graph to stderr before its result")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose tracing on stderr")
    parser.add_argument("-t", "--time", action="store_true", help="Print elapsed execution time")
    return parser


def _check_graph(graph, filename, args, digest=None):
    """Run the selected detector(s) on one graph and return its result record."""
    entry = {
        "file_path": _relpath(filename),
        "file_name": os.path.basename(filename),
        "sha256": digest,
        "n_vertices": graph.n_vertices,
        "edge_count": graph.edge_count(),
        "is_dag": None,
        "algorithm": None,
        "stats": {},
        "validation": None,
    }

    if args.validate:
        dfs = MemoizedDfsDetector(verbose=args.verbose)
        bfs = FrontierBfsDetector(verbose=args.verbose)
        dfs_result = dfs.is_dag(graph)
        bfs_result = bfs.is_dag(graph)
        entry["is_dag"] = dfs_result
        entry["algorithm"] = "both"
        entry["stats"] = {"dfs": dfs.stats(), "bfs": bfs.stats()}
        entry["validation"] = {
            "dfs": dfs_result,
            "bfs": bfs_result,
            "status": "PASS" if dfs_result == bfs_result else "FAIL",
        }
    else:
        detector = DETECTORS[args.algorithm](verbose=args.verbose)
        entry["is_dag"] = detector.is_dag(graph)
        entry["algorithm"] = detector.name
        entry["stats"] = detector.stats()

    return entry


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    start_time_ns = time.perf_counter_ns()
    json_requested = "--json" in argv
    parser = build_parser()

    def elapsed():
        return (time.perf_counter_ns() - start_time_ns) / 1_000_000_000.0

    # In JSON mode --help still produces one JSON object.
    if json_requested and ("--help" in argv or "-h" in argv):
        _emit_json({
            "schema_version": SCHEMA_VERSION,
            "tool": {"name": TOOL_NAME, "version": _extract_version_number()},
            "results": {"summary": {"exit_code": 0, "status": "OK", "message": "Help text"},
                        "help": {"text": parser.format_help()}},
        })
        return 0

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        if json_requested and e.code not in (0, None):
            _emit_json(make_json_payload(
                argv, None, [], 1, "ERROR", "Command-line usage error.", elapsed(),
                error={"code": "CLI_USAGE", "message": "Command-line usage error.",
                       "file_path": None, "details": {"system_exit_code": e.code}},
            ))
            return 1
        raise

    if not args.files:
        if args.json:
            _emit_json(make_json_payload(
                argv, args, [], 1, "ERROR", USAGE, elapsed(),
                error={"code": "CLI_USAGE", "message": USAGE, "file_path": None, "details": {}},
            ))
        else:
            print(f"\n{USAGE}\n", file=sys.stderr)
        return 1

    graphs = []
    disagreements = []
    try:
        for filename in args.files:
            try:
                graph = read_graph(filename, verbose=args.verbose)
                digest = _input_digest(filename) if args.json else None
            except ToolExit as e:
                if args.json:
                    _emit_json(make_json_payload(
                        argv, args, graphs, e.exit_code, "ERROR",
                        f"Error reading digraph from file {filename}", elapsed(),
                        error=_error_dict(e, filename),
                    ))
                else:
                    print(f"Error reading digraph from file {filename}", file=sys.stderr)
                    print(f"  {e.error_code}: {e.message}", file=sys.stderr)
                return e.exit_code

            if args.print_graph:
                print_graph(graph, file=sys.stderr)

            entry = _check_graph(graph, filename, args, digest)
            graphs.append(entry)

            if entry["validation"] is not None and entry["validation"]["status"] != "PASS":
                disagreements.append(filename)

            if not args.json:
                print(f"{filename} is a dag? {int(entry['is_dag'])}")
                if entry["validation"] is not None:
                    v = entry["validation"]
                    print(f"  validate: dfs={int(v['dfs'])} bfs={int(v['bfs'])} {v['status']}")
    except KeyboardInterrupt:
        print("[WARN] Interrupted by user.", file=sys.stderr)
        if args.json:
            _emit_json(make_json_payload(
                argv, args, graphs, 130, "ERROR", "Interrupted by user.", elapsed(),
                error={"code": "INTERRUPTED", "message": "Interrupted by user.",
                       "file_path": None, "details": {}},
            ))
        return 130

    exit_code = 1 if disagreements else 0

    if args.json:
        if disagreements:
            status, message = "FAIL", f"Detectors disagree on: {', '.join(disagreements)}"
        else:
            status, message = "OK", "All digraphs checked"
        _emit_json(make_json_payload(argv, args, graphs, exit_code, status, message, elapsed()))
        return exit_code

    if disagreements:
        print(f"Validation result: FAIL (detectors disagree on {len(disagreements)} file(s))")
    elif args.validate:
        print("Validation result: PASS")

    if args.time:
        secs = elapsed()
        print(f"Elapsed Time (seconds): {secs:.9f} (ns={int(secs * 1_000_000_000)})")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
