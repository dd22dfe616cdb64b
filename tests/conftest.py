import json

import pytest
import requests

from geoapify_geocoder import GeoApify


class StubResponse:
    def __init__(self, status_code=200, body="", reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self.text = body

    def json(self):
        return json.loads(self.text)


class StubSession:
    """Records requested URLs and replays queued responses or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append({"url": url, "timeout": timeout})
        outcome = self.responses.pop(0) if self.responses else StubResponse(body="{}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


FEATURES = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"city": "London", "country": "United Kingdom"},
            "geometry": {"type": "Point", "coordinates": [-0.1276, 51.5034]},
        }
    ],
}


@pytest.fixture
def features():
    return json.loads(json.dumps(FEATURES))


@pytest.fixture
def stub_session():
    return StubSession(StubResponse(body=json.dumps(FEATURES)))


@pytest.fixture
def client(stub_session):
    return GeoApify(api_key="test-key", session=stub_session)


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")
