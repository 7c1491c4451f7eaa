import io


def text(s):
    """In-memory text stream that keeps line endings as written."""
    return io.StringIO(s, newline="")


def edge_pairs(G):
    """Set of (source, target) pairs as strings."""
    return {(str(s), str(t)) for s, t in G.edge_definitions.values()}


def weights_by_pair(G):
    """(source, target) -> weight for every edge."""
    return {
        (str(s), str(t)): G.get_edge_weight(e) for e, (s, t) in G.edge_definitions.items()
    }
