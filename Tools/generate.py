import sys
import random


def generate_graph(num_vertices: int, file_name: str, edge_prob: float = None, acyclic: bool = False,
                   seed: int = None) -> None:
    """
    Generates a digraph in the is_dag input format:
      - first line: number of vertices
      - one line per vertex: its out-edge mask as a 0x.. literal

    Guarantees:
      - 1 <= num_vertices <= 32
      - no mask has bits at or beyond num_vertices
      - with acyclic=True the graph is a DAG: edges only go from a vertex to a
        later vertex in a random ordering, and there are no self-loops
    """

    if seed is not None:
        random.seed(seed)

    # Reasonable default edge density
    if edge_prob is None:
        edge_prob = 2.0 / num_vertices

    # Random topological order (only used for acyclic graphs)
    order = list(range(num_vertices))
    random.shuffle(order)
    rank = {v: i for i, v in enumerate(order)}

    masks = [0] * num_vertices
    for u in range(num_vertices):
        for v in range(num_vertices):
            if acyclic and rank[v] <= rank[u]:
                continue                # only forward edges, no self-loops
            if random.random() < edge_prob:
                masks[u] |= 1 << v

    with open(file_name, "w", newline="\n") as f:
        f.write(f"# generated: vertices={num_vertices} edge_prob={edge_prob} "
                f"acyclic={acyclic} seed={seed}\n")
        f.write(f"{num_vertices}\n")
        for mask in masks:
            f.write(f"0x{mask:08x}\n")


if __name__ == "__main__":
    # Usage:
    #   python generate.py <num_vertices> <file_name> [edge_prob] [seed] [--acyclic]

    argv = [a for a in sys.argv[1:] if a != "--acyclic"]
    acyclic = "--acyclic" in sys.argv[1:]

    if len(argv) not in (2, 3, 4):
        print("Usage: python generate.py <num_vertices> <file_name> [edge_prob] [seed] [--acyclic]")
        sys.exit(1)

    try:
        num_vertices = int(argv[0])
    except ValueError:
        print("Error: <num_vertices> must be a whole number between 1 and 32.")
        sys.exit(1)

    if num_vertices < 1 or num_vertices > 32:
        print("Error: Number of vertices must be between 1 and 32.")
        sys.exit(1)

    file_name = argv[1]

    edge_prob = None
    seed = None

    if len(argv) >= 3:
        try:
            edge_prob = float(argv[2])
            if not 0.0 <= edge_prob <= 1.0:
                raise ValueError
        except ValueError:
            print("Error: [edge_prob] must be a number between 0 and 1.")
            sys.exit(1)

    if len(argv) == 4:
        try:
            seed = int(argv[3])
        except ValueError:
            print("Error: [seed] must be a whole number.")
            sys.exit(1)

    generate_graph(num_vertices, file_name, edge_prob, acyclic, seed)
