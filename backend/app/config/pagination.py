DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def normalize_pagination(limit_raw, offset_raw):
    """Clamp raw query-string limit/offset; ValueError when not integers."""
    try:
        limit = DEFAULT_LIMIT if limit_raw in (None, '') else int(limit_raw)
        offset = 0 if offset_raw in (None, '') else int(offset_raw)
    except (TypeError, ValueError):
        raise ValueError('limit/offset must be int')
    return max(1, min(limit, MAX_LIMIT)), max(0, offset)
