import matplotlib

matplotlib.use("Agg")

import pytest

from solr_ltr.solr_client import SolrClient
from tests.helpers import FakeSession


@pytest.fixture
def fake_client():
    def make(routes=None):
        client = SolrClient("http://solr:8983/solr/", "tmdb")
        client.session = FakeSession(routes)
        return client
    return make


@pytest.fixture
def write_csv(tmp_path):
    def write(name, text):
        path = tmp_path / name
        path.write_text(text, encoding='utf-8')
        return str(path)
    return write
