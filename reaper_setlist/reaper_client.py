import logging
import time
import uuid
from datetime import timedelta

import requests
from requests.auth import HTTPBasicAuth

from reaper_setlist.reaper_protocol import (
    SECTION, GO_TO_START, GO_TO_END, NEW_TAB, GET_TRANSPORT,
    PROJECT_ROOT_FOLDER, PROJECT_FILE_LIST, TEMP_LOAD_PROJECT_PATH,
    TEST_NONCE_IN, TEST_NONCE_OUT, DUMMY_MODE,
    ReaperError, HttpError, CommandError, ConfigError, NonceMismatch,
    command_url, set_ext_state_url, get_ext_state_url,
    parse_ext_state, parse_transport_seconds, parse_project_list,
)

DEFAULT_TIMEOUT = 5.0
DEFAULT_LIST_TIMEOUT = 2.0
DEFAULT_POLL_INTERVAL = 0.1

# Written to project_file_list before the list script runs; any other value
# means the script has answered.
LIST_PENDING = '__PENDING__'
TEST_PROJECT_PATH = 'test-dummy-song.rpp'


class ReaperClient:
    """Drives Reaper through its web control interface.

    Every operation is a fixed sequence of GET requests. Nothing is retried
    and nothing is rolled back: if a step fails halfway, whatever ExtState was
    already written stays written.
    """

    def __init__(self, settings, session=None, timeout=DEFAULT_TIMEOUT,
                 list_timeout=DEFAULT_LIST_TIMEOUT, poll_interval=DEFAULT_POLL_INTERVAL):
        if not settings.reaper_url:
            raise ConfigError("Reaper URL is not configured")
        self.settings = settings
        self.base_url = settings.reaper_url
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.list_timeout = list_timeout
        self.poll_interval = poll_interval
        self.auth = None
        if settings.reaper_username:
            self.auth = HTTPBasicAuth(settings.reaper_username, settings.reaper_password or '')

    def _get(self, url):
        logging.debug(f"Reaper GET {url}")
        try:
            return self.session.get(url, auth=self.auth, timeout=self.timeout)
        except requests.RequestException as e:
            raise HttpError(f"Could not reach Reaper at {self.base_url}: {e}") from e

    @staticmethod
    def _ok(response):
        return 200 <= response.status_code < 300

    def run_numbered_command(self, code):
        response = self._get(command_url(self.base_url, code))
        if not self._ok(response):
            raise CommandError(f"Command '{code}' failed with status: {response.status_code}")
        return response.text

    def run_action(self, action_id):
        response = self._get(command_url(self.base_url, action_id))
        if not self._ok(response):
            raise CommandError(f"Action '{action_id}' failed with status: {response.status_code}")
        return response.text

    def set_ext_state(self, section, key, value):
        response = self._get(set_ext_state_url(self.base_url, section, key, value))
        if not self._ok(response):
            raise CommandError(f"Failed to set ExtState {section}/{key}: {response.status_code}")

    def get_ext_state(self, section, key):
        """Returns the stored value, '' for an empty entry, or None if Reaper gave no usable answer."""
        response = self._get(get_ext_state_url(self.base_url, section, key))
        if not self._ok(response):
            raise CommandError(f"Failed to get ExtState {section}/{key}: {response.status_code}")
        reply = parse_ext_state(response.text)
        if reply.as_optional() is None:
            logging.debug(f"Unrecognized ExtState reply for {section}/{key}: {response.text!r}")
        return reply.as_optional()

    def test_connectivity(self):
        """Returns Reaper's raw status code for a transport query; never raises on non-2xx."""
        return self._get(command_url(self.base_url, GET_TRANSPORT)).status_code

    def go_to_start(self):
        self.run_numbered_command(GO_TO_START)

    def go_to_end(self):
        self.run_numbered_command(GO_TO_END)

    def new_tab(self):
        self.run_numbered_command(NEW_TAB)

    def get_duration(self):
        # Moving to the end is the only way to read the project length.
        self.go_to_end()
        return timedelta(seconds=parse_transport_seconds(self.run_numbered_command(GET_TRANSPORT)))

    def _require_action_id(self, attr, script_name):
        action_id = getattr(self.settings, attr)
        if not action_id:
            raise ConfigError(f"{script_name} script action ID not configured")
        return action_id

    def set_project_root(self, folder_path):
        self.set_ext_state(SECTION, PROJECT_ROOT_FOLDER, folder_path)

    def list_projects(self, root_folder=None):
        """Lists .rpp files under Reaper's project root, relative to the configured folder.

        When root_folder is given it is written as the project root first.
        """
        action_id = self._require_action_id('list_projects_script_action_id', 'ListProjectFiles')
        if root_folder is not None:
            self.set_project_root(root_folder)
        self.set_ext_state(SECTION, PROJECT_FILE_LIST, LIST_PENDING)
        self.run_action(action_id)

        deadline = time.monotonic() + self.list_timeout
        while True:
            value = self.get_ext_state(SECTION, PROJECT_FILE_LIST)
            if value != LIST_PENDING:
                break
            if time.monotonic() >= deadline:
                raise CommandError(
                    f"ListProjectFiles script did not answer within {self.list_timeout:g}s")
            time.sleep(self.poll_interval)
        return parse_project_list(value, self.settings.folder_path)

    def load_project_by_path(self, relative_path):
        action_id = self._require_action_id('load_project_script_action_id', 'LoadProjectFromRelativePath')
        self.set_ext_state(SECTION, PROJECT_ROOT_FOLDER, self.settings.folder_path)
        self.set_ext_state(SECTION, TEMP_LOAD_PROJECT_PATH, relative_path)
        self.run_action(action_id)

    def enable_dummy_mode(self):
        self.set_ext_state(SECTION, DUMMY_MODE, '1')

    def disable_dummy_mode(self):
        self.set_ext_state(SECTION, DUMMY_MODE, '')

    def _cleanup_verification(self):
        steps = (
            ('disable dummy mode', self.disable_dummy_mode),
            ('clear test_nonce_out', lambda: self.set_ext_state(SECTION, TEST_NONCE_OUT, '')),
            ('clear test_nonce_in', lambda: self.set_ext_state(SECTION, TEST_NONCE_IN, '')),
        )
        for label, step in steps:
            try:
                step()
            except ReaperError as e:
                logging.warning(f"Script verification cleanup could not {label}: {e}")

    def verify_script(self, run_workflow, nonce=None):
        """Runs a workflow in dummy mode and checks the script echoed the nonce back.

        The installed scripts copy test_nonce_in to test_nonce_out with a
        "_modified" suffix while dummy mode is on, which proves the configured
        action id really points at them.
        """
        nonce = nonce or str(uuid.uuid4())
        expected = f"{nonce}_modified"

        self.set_ext_state(SECTION, TEST_NONCE_IN, nonce)
        try:
            self.enable_dummy_mode()
            run_workflow()
            nonce_out = self.get_ext_state(SECTION, TEST_NONCE_OUT)
        finally:
            self._cleanup_verification()

        if nonce_out is None or nonce_out == '':
            logging.warning("Nonce_out not set by script")
            raise NonceMismatch("Script did not report back; check the configured action id")
        if nonce_out != expected:
            logging.warning(f"Nonce mismatch: expected '{expected}', got '{nonce_out}'")
            raise NonceMismatch("Nonce verification failed. Script execution may not be as expected.")

    def verify_load_project(self, nonce=None):
        self.verify_script(lambda: self.load_project_by_path(TEST_PROJECT_PATH), nonce)

    def verify_list_projects(self, nonce=None):
        self.verify_script(self.list_projects, nonce)
