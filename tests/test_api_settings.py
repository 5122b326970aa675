import requests

from conftest import REAPER_URL, LIST_ACTION, LOAD_ACTION


def test_default_settings(client):
    settings = client.get('/api/settings').get_json()
    assert settings['reaperUrl'] == ''
    assert settings['loadProjectScriptActionId'] is None


def test_put_settings_persists_and_preserves_action_ids(client, app, configured):
    response = client.put('/api/settings', json={
        'reaperUrl': 'http://192.168.1.20:8080',
        'reaperUsername': 'band',
        'reaperPassword': 'secret',
        'folderPath': 'D:\\Gigs',
    })
    assert response.status_code == 200
    saved = client.get('/api/settings').get_json()
    assert saved['reaperUrl'] == 'http://192.168.1.20:8080'
    assert saved['folderPath'] == 'D:\\Gigs'
    assert saved['listProjectsScriptActionId'] == LIST_ACTION
    assert saved['loadProjectScriptActionId'] == LOAD_ACTION

    on_disk = app.extensions['reaper_setlist']['files'].load('settings.json')
    assert on_disk['reaperUsername'] == 'band'


def test_put_settings_can_clear_an_action_id_explicitly(client, configured):
    client.put('/api/settings', json={'reaperUrl': REAPER_URL, 'folderPath': 'C:\\Music',
                                      'loadProjectScriptActionId': None})
    assert client.get('/api/settings').get_json()['loadProjectScriptActionId'] is None


def test_put_settings_rejects_bad_body(client):
    assert client.put('/api/settings', json=['x']).status_code == 400
    assert client.put('/api/settings', json={'reaperUrl': 42}).status_code == 400


def test_put_action_ids(client, configured):
    response = client.put('/api/settings/action-ids', json={
        'loadProjectScriptActionId': '_RSabc',
        'listProjectsScriptActionId': 40001,
    })
    assert response.status_code == 200
    settings = client.get('/api/settings').get_json()
    assert settings['loadProjectScriptActionId'] == '_RSabc'
    assert settings['listProjectsScriptActionId'] == '40001'
    assert settings['setRootScriptActionId'] is None
    assert settings['reaperUrl'] == REAPER_URL


def test_connection_success(client, reaper):
    response = client.post('/api/settings/test-connection', json={'reaperUrl': REAPER_URL})
    assert response.status_code == 200
    assert response.get_json()['success'] is True
    assert reaper.urls == [f"{REAPER_URL}/_/TRANSPORT"]


def test_connection_accepts_snake_case_and_credentials(client, reaper):
    reaper.required_auth = ('band', 'secret')
    response = client.post('/api/settings/test-connection', json={
        'reaper_url': REAPER_URL, 'reaper_username': 'band', 'reaper_password': 'secret'})
    assert response.get_json()['success'] is True


def test_connection_reports_reaper_status(client, reaper):
    reaper.required_auth = ('band', 'secret')
    response = client.post('/api/settings/test-connection', json={'reaperUrl': REAPER_URL})
    body = response.get_json()
    assert response.status_code == 502
    assert body['success'] is False
    assert body['status'] == 401


def test_connection_unreachable(client, reaper):
    reaper.raise_on_get = requests.ConnectionError('refused')
    response = client.post('/api/settings/test-connection', json={'reaperUrl': REAPER_URL})
    assert response.status_code == 503
    assert response.get_json()['success'] is False


def test_connection_requires_url(client):
    assert client.post('/api/settings/test-connection', json={}).status_code == 400
    assert client.post('/api/settings/test-connection', json={'reaperUrl': '  '}).status_code == 400


def test_load_project_script_verification(client, configured, reaper):
    response = client.post('/api/settings/test-load-project')
    assert response.status_code == 204
    assert reaper.loaded == []
    assert reaper.state('dummy_mode') == ''


def test_list_projects_script_verification(client, configured):
    assert client.post('/api/settings/test-list-projects', json={}).status_code == 204


def test_script_verification_with_wrong_action_id(client, configured, reaper):
    reaper.scripts['40500'] = lambda fake: None
    response = client.post('/api/settings/test-load-project', json={'actionId': '40500'})
    assert response.status_code == 417
    # The override is only for the test run.
    assert client.get('/api/settings').get_json()['loadProjectScriptActionId'] == LOAD_ACTION


def test_script_verification_with_unknown_action_is_bad_gateway(client, configured):
    assert client.post('/api/settings/test-list-projects', json={'actionId': '99999'}).status_code == 502


def test_script_verification_without_configuration(client):
    assert client.post('/api/settings/test-load-project').status_code == 412
