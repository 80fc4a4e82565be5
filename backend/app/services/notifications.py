from __future__ import annotations
import logging
import os
import requests
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)


def _config(key: str, default: str = '') -> str:
    if has_app_context():
        value = current_app.config.get(key)
        if value is not None:
            return str(value).strip()
    return os.getenv(key, default).strip()


def send_notification(to: str, subject: str, body: str) -> bool:
    """Deliver a plain-text notification; never raises.

    Posts to NOTIFY_WEBHOOK_URL (mail relay) when configured, otherwise only logs.
    Returns False when delivery failed.
    """
    url = _config('NOTIFY_WEBHOOK_URL')
    if not url:
        logger.info('notification (no webhook configured) to=%s subject=%s', to, subject)
        return True
    payload = {
        'from': _config('NOTIFY_FROM_EMAIL', 'noreply@school-budget.example.com'),
        'to': to,
        'subject': subject,
        'text': body,
    }
    try:
        r = requests.post(url, json=payload, timeout=10)
    except requests.RequestException as e:
        logger.warning('notification send error to=%s: %s', to, e)
        return False
    if r.status_code >= 300:
        logger.warning('notification rejected status=%s body=%s', r.status_code, r.text[:300])
        return False
    return True


__all__ = ['send_notification']
