from app.services.views import view_invalidated, invalidate, invalidate_request_views
from tests.test_utils_seed import ensure_user, create_request
from tests.test_lifecycle_helpers import approver_headers, decide


def test_invalidate_emits_signal():
    seen = []

    def receiver(sender, path):
        seen.append((sender, path))
    view_invalidated.connect(receiver)
    try:
        invalidate('/requests/5')
    finally:
        view_invalidated.disconnect(receiver)
    assert seen == [('views', '/requests/5')]


def test_receiver_failure_is_logged_not_raised(caplog):
    def broken(sender, path):
        raise RuntimeError('cache down')
    view_invalidated.connect(broken)
    try:
        invalidate('/')
    finally:
        view_invalidated.disconnect(broken)
    assert 'view invalidation failed' in caplog.text


def test_office_paths_included_when_asked():
    paths = []
    assert invalidate_request_views(3, include_office=True, invalidate_fn=paths.append) == ['/requests/3', '/', '/office']
    assert paths == ['/requests/3', '/', '/office']


def test_decision_refreshes_views(client, app_instance):
    owner = ensure_user('views_owner@example.com', role='student', department='Views Club')
    req = create_request(owner)
    seen = []

    def receiver(sender, path):
        seen.append(path)
    view_invalidated.connect(receiver)
    try:
        assert decide(client, req.id, approver_headers(app_instance)['teacher']).status_code == 200
    finally:
        view_invalidated.disconnect(receiver)
    assert seen == [f'/requests/{req.id}', '/']
