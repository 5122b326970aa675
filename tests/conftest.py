from urllib.parse import urlsplit, unquote

import pytest

from reaper_setlist import create_app
from reaper_setlist.models import Settings

REAPER_URL = 'http://reaper.local:8080'
LIST_ACTION = '_RS7d3c_list'
LOAD_ACTION = '41234'
SECTION = 'WebAppControl'


def reaper_escape(value):
    return value.replace('\\', '\\\\').replace('\t', '\\t').replace('\n', '\\n')


class FakeResponse:
    def __init__(self, status_code=200, text=''):
        self.status_code = status_code
        self.text = text


class FakeReaper:
    """Stands in for a requests.Session talking to Reaper's web interface.

    Keeps ExtState, the play cursor and open tabs in memory, and runs Python
    versions of the installed Lua scripts when their action id is requested.
    """

    def __init__(self):
        self.ext_state = {}
        self.urls = []
        self.auths = []
        self.position = 0.0
        self.project_length = 215.5
        self.tabs = 1
        self.loaded = []
        self.project_files = []
        self.scripts = {}
        self.required_auth = None
        self.raise_on_get = None
        self.status_overrides = {}

    def state(self, key):
        return self.ext_state.get((SECTION, key), '')

    def put(self, key, value):
        self.ext_state[(SECTION, key)] = value

    def echo_nonce(self):
        nonce = self.state('test_nonce_in')
        if nonce:
            self.put('test_nonce_out', nonce + '_modified')
            self.ext_state.pop((SECTION, 'test_nonce_in'), None)

    def install_scripts(self, list_action=LIST_ACTION, load_action=LOAD_ACTION):
        self.scripts[list_action] = list_projects_script
        self.scripts[load_action] = load_project_script

    def get(self, url, auth=None, timeout=None):
        self.urls.append(url)
        self.auths.append(auth)
        if self.raise_on_get is not None:
            raise self.raise_on_get
        if self.required_auth is not None:
            if auth is None or (auth.username, auth.password) != self.required_auth:
                return FakeResponse(401, 'Unauthorized')

        raw_path = urlsplit(url).path
        assert raw_path.startswith('/_/'), url
        segments = [unquote(s) for s in raw_path[len('/_/'):].split('/')]
        if segments[0] in self.status_overrides:
            return FakeResponse(self.status_overrides[segments[0]])

        if segments[0] == 'SET' and segments[1] in ('EXTSTATE', 'EXTSTATEPERSIST'):
            self.ext_state[(segments[2], segments[3])] = segments[4]
            return FakeResponse(200, '')
        if segments[0] == 'GET' and segments[1] == 'EXTSTATE':
            section, key = segments[2], segments[3]
            if (section, key) not in self.ext_state:
                return FakeResponse(200, '')
            value = reaper_escape(self.ext_state[(section, key)])
            return FakeResponse(200, f"EXTSTATE\t{section}\t{key}\t{value}\n")
        if segments[0] == 'TRANSPORT':
            return FakeResponse(200, f"TRANSPORT\t0\t{self.position}\t0\t0:00.000\t1.1.00\n")
        if segments[0] == '40042':
            self.position = 0.0
            return FakeResponse(200, '')
        if segments[0] == '40043':
            self.position = self.project_length
            return FakeResponse(200, '')
        if segments[0] == '40859':
            self.tabs += 1
            return FakeResponse(200, '')
        if segments[0] in self.scripts:
            self.scripts[segments[0]](self)
            return FakeResponse(200, '')
        return FakeResponse(404, 'Not Found')


def list_projects_script(fake):
    if fake.state('dummy_mode') == '1':
        fake.echo_nonce()
        fake.put('project_file_list', '')
        return
    if not fake.state('project_root_folder'):
        fake.put('project_file_list', 'ERROR: project root folder not set')
        return
    fake.put('project_file_list', ','.join(fake.project_files))


def load_project_script(fake):
    relative = fake.state('temp_load_project_path')
    fake.ext_state.pop((SECTION, 'temp_load_project_path'), None)
    if fake.state('dummy_mode') == '1':
        fake.echo_nonce()
        return
    fake.loaded.append((fake.state('project_root_folder'), relative))


@pytest.fixture
def reaper():
    return FakeReaper()


@pytest.fixture
def app(tmp_path, reaper):
    app = create_app({
        'TESTING': True,
        'DATA_DIR': str(tmp_path / 'data'),
        'SPA_DIR': str(tmp_path / 'build'),
        'LIST_PROJECTS_TIMEOUT': 0.2,
        'LIST_PROJECTS_POLL_INTERVAL': 0.01,
    }, http_session=reaper)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def configured(app, reaper):
    """Settings pointing at the fake Reaper with both scripts installed."""
    settings = Settings(
        reaper_url=REAPER_URL,
        folder_path='C:\\Music',
        list_projects_script_action_id=LIST_ACTION,
        load_project_script_action_id=LOAD_ACTION,
    )
    app.extensions['reaper_setlist']['settings'].update(lambda current: settings)
    reaper.install_scripts()
    return settings
