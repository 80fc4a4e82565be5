from __future__ import annotations
from typing import Any, Dict, Mapping
from flask import abort


def apply_filters(query, specs: Dict[str, Dict[str, Any]], params: Mapping[str, Any]):
    """Apply query-string filters.

    specs: {param: {'op': callable(query, value) -> query, 'coerce': callable (optional),
                    'validate': callable(value) -> bool (optional)}}
    Blank parameters are ignored; coercion or validation failures abort with 400.
    """
    for name, meta in specs.items():
        raw = params.get(name)
        if raw is None or raw == '':
            continue
        value = raw
        if 'coerce' in meta:
            try:
                value = meta['coerce'](raw)
            except (TypeError, ValueError):
                abort(400, description=f'{name} invalid')
        validate = meta.get('validate')
        if validate and not validate(value):
            abort(400, description=f'{name} invalid')
        query = meta['op'](query, value)
    return query
