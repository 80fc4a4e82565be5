from tests.test_utils_seed import ensure_user, ensure_fund
from tests.test_lifecycle_helpers import headers_for


def test_workflow_definition_is_public(client):
    resp = client.get('/workflow')
    assert resp.status_code == 200
    body = resp.get_json()
    assert [s['role'] for s in body['chain']] == ['teacher', 'kyoto', 'vice_principal', 'principal', 'office_chief', 'chairman']
    assert {'from': 'approved', 'to': 'ready_for_payment'} in body['office_steps']
    assert body['transitions']['rejected'] == []
    assert body['status_labels']['completed']


def test_funds_list_and_create(client, app_instance):
    ensure_fund('教材費')
    clerk = ensure_user('fund_clerk@example.com', role='office_chief')
    student = ensure_user('fund_student@example.com', role='student', department='Fund Club')
    listed = client.get('/funds', headers=headers_for(app_instance, student))
    assert listed.status_code == 200
    assert '教材費' in [f['name'] for f in listed.get_json()['data']]
    assert listed.headers.get('ETag')

    denied = client.post('/funds', json={'name': '行事費', 'year': 2026}, headers=headers_for(app_instance, student))
    assert denied.status_code == 403
    created = client.post('/funds', json={'name': '行事費', 'year': 2026}, headers=headers_for(app_instance, clerk))
    assert created.status_code == 201, created.get_json()
    assert created.get_json()['year'] == 2026
    dup = client.post('/funds', json={'name': '行事費', 'year': 2026}, headers=headers_for(app_instance, clerk))
    assert dup.status_code == 400
    bad = client.post('/funds', json={'name': 'x', 'year': 'soon'}, headers=headers_for(app_instance, clerk))
    assert bad.status_code == 400


def test_item_categories_need_department(client, app_instance):
    student = ensure_user('cat_student@example.com', role='student', department='Cat Club')
    headers = headers_for(app_instance, student)
    assert client.get('/item-categories', headers=headers).status_code == 400
    resp = client.get('/item-categories', query_string={'department': 'Nobody'}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['data'] == []


def test_healthz(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}
