from __future__ import annotations
"""Local-disk attachment store.

Files land in <UPLOAD_FOLDER>/uploads/<epoch-ms>-<random>.<ext>; the returned
reference is the path relative to UPLOAD_FOLDER.
"""
import os
import secrets
import time
from typing import Optional, Tuple
from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from app.config.uploads import ALLOWED_CONTENT_TYPES, MAX_ATTACHMENT_BYTES, UPLOAD_SUBDIR


def _size_label(n: int) -> str:
    if n >= 1024 * 1024 and n % (1024 * 1024) == 0:
        return f'{n // (1024 * 1024)}MB'
    return f'{n}バイト'


def has_file(file: Optional[FileStorage]) -> bool:
    return file is not None and bool(file.filename)


def read_and_validate(file: FileStorage, max_bytes: Optional[int] = None) -> Tuple[Optional[bytes], Optional[str]]:
    """Return (data, error message)."""
    limit = max_bytes or current_app.config.get('MAX_ATTACHMENT_BYTES') or MAX_ATTACHMENT_BYTES
    if file.mimetype not in ALLOWED_CONTENT_TYPES:
        return None, '画像（JPEG, PNG, GIF, WebP, HEIC）またはPDFファイルのみアップロードできます。'
    data = file.read(limit + 1)
    if len(data) > limit:
        return None, f'ファイルサイズは{_size_label(limit)}以下にしてください。'
    if not data:
        return None, 'ファイルが空です。'
    return data, None


def save_attachment(filename: str, data: bytes) -> str:
    root = current_app.config['UPLOAD_FOLDER']
    safe = secure_filename(filename or '')
    ext = safe.rsplit('.', 1)[-1].lower() if '.' in safe else 'bin'
    name = f'{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}'
    target_dir = os.path.join(root, UPLOAD_SUBDIR)
    os.makedirs(target_dir, exist_ok=True)
    with open(os.path.join(target_dir, name), 'wb') as fh:
        fh.write(data)
    return f'{UPLOAD_SUBDIR}/{name}'


def remove_attachment(reference: str) -> None:
    path = os.path.join(current_app.config['UPLOAD_FOLDER'], reference)
    if os.path.isfile(path):
        os.remove(path)


__all__ = ['has_file', 'read_and_validate', 'save_attachment', 'remove_attachment']
