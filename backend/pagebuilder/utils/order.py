from collections import defaultdict
from datetime import datetime, timezone


def normalize_ts(ts):
    """
    Ensure datetime is timezone-aware.
    Defaults to UTC if naive.
    """
    if ts is None:
        return datetime.max.replace(tzinfo=timezone.utc)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def sort_key(row):
    """Siblings ascend by sort, ties by insertion order, then id."""
    return (row.sort, normalize_ts(row.created_at), row.id or "")


def children_by_parent(rows):
    """
    Groups rows under their parent id, each group in sibling order.
    """
    grouped = defaultdict(list)
    for row in rows:
        grouped[row.parent_id].append(row)
    for siblings in grouped.values():
        siblings.sort(key=sort_key)
    return grouped


def walk_tree(rows):
    """
    Yields (row, depth) top-down, parents before children.
    Rows whose parent is not in `rows` are treated as roots.
    """
    ids = {row.id for row in rows}
    grouped = children_by_parent(rows)
    roots = [row for row in rows if row.parent_id is None or row.parent_id not in ids]
    roots.sort(key=sort_key)

    stack = [(row, 0) for row in reversed(roots)]
    while stack:
        row, depth = stack.pop()
        yield row, depth
        for child in reversed(grouped.get(row.id, [])):
            stack.append((child, depth + 1))


def descendant_ids(rows, root_ids):
    """All ids below (and including) root_ids."""
    grouped = children_by_parent(rows)
    result = set()
    pending = list(root_ids)
    while pending:
        current = pending.pop()
        if current in result:
            continue
        result.add(current)
        pending.extend(child.id for child in grouped.get(current, []))
    return result

