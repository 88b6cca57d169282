from skill_layout.models import SkillNode


def make_nodes(count, prefix="n"):
    return [SkillNode(id=f"{prefix}{i}", score=1 + i % 10) for i in range(count)]


def neighbor_map(positions):
    return {p.id: list(p.neighbors) for p in positions}


def is_single_cycle(adjacency):
    """Every node has degree 2 and a walk from any node visits all of them."""
    if any(len(v) != 2 for v in adjacency.values()):
        return False
    start = next(iter(adjacency))
    prev, current, seen = None, start, {start}
    while True:
        nxt = [n for n in adjacency[current] if n != prev][0]
        if nxt == start:
            break
        if nxt in seen:
            return False
        seen.add(nxt)
        prev, current = current, nxt
    return len(seen) == len(adjacency)
