"""
Test the Apple Pay domain association routes
"""
import asyncio
import unittest
import sys
import os
import tempfile
from pathlib import Path
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from core.config import DeployConfig
from core.resources import DOMAIN_ASSOCIATION_NAME
from api.well_known import DomainAssociationResponse

PLAIN_URL = '/.well-known/apple-developer-merchantid-domain-association'
TXT_URL = PLAIN_URL + '.txt'


class WellKnownTestCase(unittest.TestCase):

    packaged = False

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.well_known = self.root / 'public' / '.well-known'
        self.well_known.mkdir(parents=True)
        self.config = DeployConfig(
            packaged=self.packaged,
            public_dir=self.root / 'public',
            dist_dir=self.root / 'dist',
            cwd=self.root / 'cwd',
        )
        self.client = TestClient(create_app(self.config))

    def tearDown(self):
        self.tmp.cleanup()

    def write_plain(self, content='plain-association'):
        (self.well_known / DOMAIN_ASSOCIATION_NAME).write_text(content)

    def write_txt(self, content='txt-association'):
        (self.well_known / (DOMAIN_ASSOCIATION_NAME + '.txt')).write_text(content)


class TestPlainVariant(WellKnownTestCase):

    def test_serves_text_plain_with_cache(self):
        self.write_plain()
        response = self.client.get(PLAIN_URL)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, 'plain-association')
        self.assertEqual(response.headers['content-type'], 'text/plain')
        self.assertEqual(response.headers['cache-control'], 'public, max-age=3600')

    def test_missing_file_is_plain_text_404(self):
        response = self.client.get(PLAIN_URL)
        self.assertEqual(response.status_code, 404)
        self.assertTrue(response.headers['content-type'].startswith('text/plain'))
        self.assertEqual(response.text, 'Domain association file not found')
        self.assertNotIn('<html', response.text.lower())

    def test_plain_url_ignores_txt_file(self):
        self.write_txt()
        response = self.client.get(PLAIN_URL)
        self.assertEqual(response.status_code, 404)

    def test_working_directory_fallback(self):
        cwd_file = self.root / 'cwd' / '.well-known' / DOMAIN_ASSOCIATION_NAME
        cwd_file.parent.mkdir(parents=True)
        cwd_file.write_text('from-cwd')
        response = self.client.get(PLAIN_URL)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, 'from-cwd')

    def test_head_request(self):
        self.write_plain()
        response = self.client.head(PLAIN_URL)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers['content-type'], 'text/plain')

    def test_lookup_is_logged(self):
        self.write_plain()
        with self.assertLogs('core.resources', level='INFO') as captured:
            self.client.get(PLAIN_URL)
        output = '\n'.join(captured.output)
        self.assertIn(PLAIN_URL, output)
        self.assertIn('File found', output)


class TestExtensionedVariant(WellKnownTestCase):

    def test_prefers_txt_file(self):
        self.write_plain()
        self.write_txt()
        response = self.client.get(TXT_URL)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, 'txt-association')
        self.assertEqual(response.headers['cache-control'], 'public, max-age=3600')

    def test_falls_back_to_plain_file(self):
        self.write_plain()
        response = self.client.get(TXT_URL)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, 'plain-association')
        self.assertEqual(response.headers['content-type'], 'text/plain')

    def test_txt_in_cwd_beats_plain_in_public(self):
        # every .txt candidate is tried before any plain candidate
        self.write_plain()
        cwd_txt = self.root / 'cwd' / 'public' / '.well-known' / (DOMAIN_ASSOCIATION_NAME + '.txt')
        cwd_txt.parent.mkdir(parents=True)
        cwd_txt.write_text('cwd-txt')
        response = self.client.get(TXT_URL)
        self.assertEqual(response.text, 'cwd-txt')

    def test_missing_both_is_plain_text_404(self):
        response = self.client.get(TXT_URL)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.text, 'Domain association file not found')


class TestPackagedPrecedence(WellKnownTestCase):
    """The verification route wins over a copy shipped inside the build output"""

    packaged = True

    def test_verification_route_beats_static_copy(self):
        self.write_plain('from-public')
        dist_copy = self.root / 'dist' / '.well-known' / DOMAIN_ASSOCIATION_NAME
        dist_copy.parent.mkdir(parents=True)
        dist_copy.write_text('from-dist')
        (self.root / 'dist' / 'index.html').write_text('<html></html>')

        response = self.client.get(PLAIN_URL)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, 'from-public')
        self.assertEqual(response.headers['content-type'], 'text/plain')

    def test_missing_file_never_serves_bootstrap(self):
        (self.root / 'dist').mkdir()
        (self.root / 'dist' / 'index.html').write_text('<html>app</html>')
        response = self.client.get(PLAIN_URL)
        self.assertEqual(response.status_code, 404)
        self.assertNotIn('<html', response.text)


class TestTransferFailure(unittest.TestCase):
    """Sending failures before and after the response has started"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_failure_before_start_returns_500(self):
        missing = self.root / 'vanished'
        app = FastAPI()

        @app.get('/file')
        async def vanished():
            return DomainAssociationResponse(missing)

        response = TestClient(app).get('/file')
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.text, 'Error serving domain association file')

    def test_failure_after_start_sends_nothing_more(self):
        path = self.root / 'association'
        path.write_text('content')
        messages = []

        async def receive():
            return {'type': 'http.request', 'body': b'', 'more_body': False}

        async def send(message):
            messages.append(message)
            if message['type'] == 'http.response.body':
                raise OSError('connection reset by peer')

        scope = {
            'type': 'http',
            'asgi': {'version': '3.0', 'spec_version': '2.3'},
            'http_version': '1.1',
            'method': 'GET',
            'scheme': 'http',
            'path': '/file',
            'raw_path': b'/file',
            'root_path': '',
            'query_string': b'',
            'headers': [],
            'server': ('testserver', 80),
            'client': ('testclient', 50000),
        }
        asyncio.run(DomainAssociationResponse(path)(scope, receive, send))

        starts = [m for m in messages if m['type'] == 'http.response.start']
        self.assertEqual(len(starts), 1)
        self.assertEqual(starts[0]['status'], 200)


if __name__ == "__main__":
    unittest.main()
