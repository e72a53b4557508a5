from collections import defaultdict
from pagebuilder.domain.exceptions import InvariantViolation, ValidationError


def assert_sorts(nodes):
    """
    nodes: iterable of (key, parent_key, sort).

    Sorts are non-negative and unique among siblings.
    """
    seen = defaultdict(set)
    for key, parent_key, sort in nodes:
        if sort < 0:
            raise ValidationError("INVALID_SORT", f"Negative sort {sort} for module {key}", sort=sort)
        if sort in seen[parent_key]:
            raise InvariantViolation(
                "DUPLICATE_SORT",
                f"Duplicate sort {sort} under parent {parent_key}",
                sort=sort,
                parent=parent_key,
            )
        seen[parent_key].add(sort)


def assert_acyclic(parents):
    """
    parents: mapping key -> parent key (None for roots).
    """
    for start in parents:
        visited = set()
        node = start
        while node is not None:
            if node in visited:
                raise InvariantViolation("PARENT_CYCLE", f"Parent cycle through module {start}")
            visited.add(node)
            node = parents.get(node)
