from app.errors import ForbiddenError, ValidationError, ConcurrentModificationError, PersistenceError, AuditWriteWarning


def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    # Flask default 404 should be wrapped by error handler
    assert resp.status_code == 404
    body = resp.get_json()
    assert 'error' in body
    assert body['error']['status'] == 404
    assert 'detail' in body['error']


def test_workflow_errors_carry_extra_context():
    err = ForbiddenError(required_role='chairman', actor_role='principal')
    assert err.code == 403
    assert err.description == "This step requires role 'chairman' (current role: principal)"
    v = ValidationError({'title': 'required'})
    assert v.extra == {'field_errors': {'title': 'required'}}
    assert ConcurrentModificationError().code == 409
    assert PersistenceError().code == 503
    w = AuditWriteWarning(cause=RuntimeError('x'))
    assert 'approval history' in w.message


def test_internal_error_shape(client, app_instance, monkeypatch):
    from tests.test_utils_seed import ensure_user
    from tests.test_lifecycle_helpers import headers_for
    import app.routes.reference as ref_mod
    user = ensure_user('err@example.com', role='student', department='Err Club')
    headers = headers_for(app_instance, user)

    class BoomSession:
        def query(self, *a, **k):
            raise RuntimeError('explode')
    monkeypatch.setattr(ref_mod, 'get_db', lambda: BoomSession())
    resp = client.get('/funds', headers=headers)
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error']['status'] == 500
    assert body['error']['title'] == 'Internal Server Error'
