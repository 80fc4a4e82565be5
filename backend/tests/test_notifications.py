import requests
from app.services import notifications
from app.services.notifications import send_notification


class FakeResponse:
    def __init__(self, status_code, text=''):
        self.status_code = status_code
        self.text = text


def test_no_webhook_only_logs(app_instance, monkeypatch):
    monkeypatch.delenv('NOTIFY_WEBHOOK_URL', raising=False)
    called = []
    monkeypatch.setattr(notifications.requests, 'post', lambda *a, **k: called.append(k))
    with app_instance.app_context():
        assert send_notification('a@example.com', 'subject', 'body') is True
    assert called == []


def test_webhook_post_payload(app_instance, monkeypatch):
    sent = {}

    def fake_post(url, json=None, timeout=None):
        sent.update(url=url, json=json, timeout=timeout)
        return FakeResponse(202)
    monkeypatch.setattr(notifications.requests, 'post', fake_post)
    monkeypatch.setitem(app_instance.config, 'NOTIFY_WEBHOOK_URL', 'https://mail.example.com/send')
    with app_instance.app_context():
        assert send_notification('a@example.com', '【現金準備完了】ボール', 'body') is True
    assert sent['url'] == 'https://mail.example.com/send'
    assert sent['json']['to'] == 'a@example.com'
    assert sent['json']['subject'] == '【現金準備完了】ボール'
    assert sent['json']['from'] == app_instance.config['NOTIFY_FROM_EMAIL']
    assert sent['timeout'] == 10


def test_webhook_failures_return_false(app_instance, monkeypatch):
    monkeypatch.setitem(app_instance.config, 'NOTIFY_WEBHOOK_URL', 'https://mail.example.com/send')
    monkeypatch.setattr(notifications.requests, 'post', lambda *a, **k: FakeResponse(500, 'boom'))
    with app_instance.app_context():
        assert send_notification('a@example.com', 's', 'b') is False

    def unreachable(*a, **k):
        raise requests.ConnectionError('refused')
    monkeypatch.setattr(notifications.requests, 'post', unreachable)
    with app_instance.app_context():
        assert send_notification('a@example.com', 's', 'b') is False
