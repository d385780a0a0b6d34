from __future__ import annotations
from typing import Iterable, Optional
from flask import request, make_response
import hashlib


def compute_etag(keys: Iterable[str], total: int, limit: int, offset: int) -> str:
    seed = f"{list(keys)}|{total}|{limit}|{offset}"
    return hashlib.sha256(seed.encode()).hexdigest()[:32]


def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }


def not_modified(etag_value: str):
    """304 response when If-None-Match carries ``etag_value``, else None."""
    inm = request.headers.get('If-None-Match')
    if inm and etag_value in [tag.strip().strip('"') for tag in inm.split(',')]:
        resp = make_response('', 304)
        resp.headers['ETag'] = etag_value
        return resp
    return None


def make_cached_list_response(rows: list, total: int, limit: int, offset: int, key: str = 'code', etag_seed: Optional[Iterable[str]] = None):
    """List response carrying an ETag derived from the page's keys; honours If-None-Match."""
    keys = list(etag_seed) if etag_seed is not None else [str(r.get(key)) for r in rows]
    etag = compute_etag(keys, total, limit, offset)
    cached = not_modified(etag)
    if cached is not None:
        return cached
    resp = make_response(build_list_payload(rows, total, limit, offset))
    resp.headers['ETag'] = etag
    return resp
