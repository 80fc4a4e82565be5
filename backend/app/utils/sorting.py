from __future__ import annotations
from flask import abort


def apply_multi_sort(query, sort_expr: str | None, allowed: dict, tie_breaker, default=None):
    """Order by a comma separated list of keys, '-' prefix for descending.

    allowed maps key -> column; tie_breaker is always appended. `default` (a list of
    clauses) is used when sort_expr is empty.
    """
    if not sort_expr:
        return query.order_by(*(default or []), tie_breaker.asc())
    clauses = []
    for token in (t.strip() for t in sort_expr.split(',')):
        if not token:
            continue
        key = token.lstrip('-')
        col = allowed.get(key)
        if col is None:
            abort(400, description=f'Invalid sort field {key}')
        clauses.append(col.desc() if token.startswith('-') else col.asc())
    return query.order_by(*clauses, tie_breaker.asc())
