from __future__ import annotations
"""View refresh signalling.

After a status change the affected pages (request detail, dashboard, office queue)
are announced on the `view_invalidated` signal. Receivers (cache purgers, tests)
subscribe with `view_invalidated.connect`. Best effort: receiver failures are logged.
"""
import logging
from typing import List
from blinker import Namespace

logger = logging.getLogger(__name__)

_signals = Namespace()
view_invalidated = _signals.signal('view-invalidated')


def invalidate(path: str) -> None:
    try:
        view_invalidated.send('views', path=path)
    except Exception:
        logger.warning('view invalidation failed for %s', path, exc_info=True)


def request_view_paths(request_id: int, include_office: bool = False) -> List[str]:
    paths = [f'/requests/{request_id}', '/']
    if include_office:
        paths.append('/office')
    return paths


def invalidate_request_views(request_id: int, include_office: bool = False, invalidate_fn=invalidate) -> List[str]:
    paths = request_view_paths(request_id, include_office)
    for path in paths:
        invalidate_fn(path)
    return paths


__all__ = ['view_invalidated', 'invalidate', 'request_view_paths', 'invalidate_request_views']
