from __future__ import annotations
"""Pagination and HTTP caching helpers for list and detail endpoints.

Responses carry ETag, Last-Modified and X-Last-Modified-ISO; If-None-Match takes
precedence over If-Modified-Since when answering 304.
"""
from typing import Any, Dict, Iterable, Optional, Tuple
from flask import request, abort, make_response, jsonify
from app.config.pagination import normalize_pagination
import hashlib
from datetime import datetime, timezone, timedelta
from email.utils import parsedate_to_datetime, format_datetime

TIMESTAMP_TOLERANCE = timedelta(seconds=1)


def canonicalize_timestamp(dt: datetime) -> datetime:
    """UTC, tz-aware, whole seconds."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0)


def iso_z(dt: Optional[datetime]) -> str:
    return canonicalize_timestamp(dt).isoformat().replace('+00:00', 'Z') if dt else ''


def http_date(dt: datetime) -> str:
    return format_datetime(canonicalize_timestamp(dt), usegmt=True)


def apply_pagination(q) -> Tuple[Any, int, int, int]:
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    total = q.count()
    return q.offset(offset).limit(limit), total, limit, offset


def compute_etag(*parts: Any) -> str:
    seed = '|'.join(str(p) for p in parts)
    return hashlib.sha256(seed.encode()).hexdigest()[:32]


def latest_timestamp(values: Iterable[Optional[datetime]]) -> Optional[datetime]:
    stamps = [canonicalize_timestamp(v) for v in values if isinstance(v, datetime)]
    return max(stamps) if stamps else None


def _set_cache_headers(resp, etag: str, latest_ts: Optional[datetime]):
    resp.headers['ETag'] = etag
    if latest_ts:
        resp.headers['Last-Modified'] = http_date(latest_ts)
        resp.headers['X-Last-Modified-ISO'] = iso_z(latest_ts)
    return resp


def list_payload(rows: list, total: int, limit: int, offset: int) -> Dict[str, Any]:
    return {
        'data': rows,
        'pagination': {'total': total, 'limit': limit, 'offset': offset, 'returned': len(rows)},
    }


def _parse_if_modified_since(raw: str) -> Optional[datetime]:
    try:
        dt = datetime.fromisoformat(raw.replace('Z', '+00:00'))
    except ValueError:
        try:
            dt = parsedate_to_datetime(raw)
        except (TypeError, ValueError):
            return None
    if dt is None:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def not_modified(etag: str, latest_ts: Optional[datetime]):
    """304 response when the conditional headers match, else None."""
    inm = request.headers.get('If-None-Match')
    if inm and inm.strip('"') == etag:
        return _set_cache_headers(make_response('', 304), etag, latest_ts)
    ims_raw = request.headers.get('If-Modified-Since')
    if ims_raw and latest_ts:
        ims = _parse_if_modified_since(ims_raw)
        if ims and canonicalize_timestamp(latest_ts) <= canonicalize_timestamp(ims) + TIMESTAMP_TOLERANCE:
            return _set_cache_headers(make_response('', 304), etag, latest_ts)
    return None


def cached_json(body: Dict[str, Any], etag: str, latest_ts: Optional[datetime]):
    """JSON response with caching headers, a 304 when conditional, and an empty body for HEAD."""
    resp = not_modified(etag, latest_ts)
    if resp is None:
        resp = _set_cache_headers(make_response(jsonify(body)), etag, latest_ts)
    if request.method == 'HEAD':
        resp.set_data(b'')
    return resp


def cached_list_response(rows: list, total: int, limit: int, offset: int, latest_ts: Optional[datetime] = None):
    etag = compute_etag([(r.get('id'), r.get('status')) for r in rows], total, limit, offset, iso_z(latest_ts))
    return cached_json(list_payload(rows, total, limit, offset), etag, latest_ts)
