import json

import pytest
import requests

import nglseg
from nglseg.ngl import decode_scene


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.requested = []

    def get(self, url, **kwargs):
        self.requested.append(url)
        return self.responses[url]


STATE_URL = "https://globalv1.flywire-daf.com/nglstate/5409525645443072"


def test_decode_json_text(scene):
    assert decode_scene(json.dumps(scene)) == scene


def test_decode_fragment(scene, scene_url):
    assert decode_scene(scene_url) == scene


def test_decode_unquoted_fragment(scene):
    url = "https://neuroglancer-demo.appspot.com/#!" + json.dumps(scene)
    assert decode_scene(url) == scene


def test_decode_json_url(scene):
    session = FakeSession({STATE_URL: FakeResponse(json.dumps(scene))})
    url = f"https://ngl.flywire.ai/?json_url={STATE_URL}"

    assert decode_scene(url, session=session) == scene
    assert session.requested == [STATE_URL]


def test_decode_fragment_url(scene):
    session = FakeSession({STATE_URL: FakeResponse(json.dumps(scene))})
    url = f"https://neuroglancer-demo.appspot.com/#!{STATE_URL}"

    assert decode_scene(url, session=session) == scene


def test_decode_json_url_default_session(scene, monkeypatch):
    requested = []

    def fake_get(url, **kwargs):
        requested.append(url)
        return FakeResponse(json.dumps(scene))

    monkeypatch.setattr(requests, "get", fake_get)
    url = f"https://ngl.flywire.ai/?json_url={STATE_URL}"

    assert nglseg.ngl_segments(url, as_text=True,
                               include_hidden=False).tolist() == ["1", "2", "3"]
    assert requested == [STATE_URL]


def test_decode_http_error():
    session = FakeSession({STATE_URL: FakeResponse("Forbidden", status_code=403)})
    url = f"https://ngl.flywire.ai/?json_url={STATE_URL}"

    with pytest.raises(nglseg.DecodeError):
        decode_scene(url, session=session)


def test_decode_bad_remote_json():
    session = FakeSession({STATE_URL: FakeResponse("<html></html>")})
    url = f"https://ngl.flywire.ai/?json_url={STATE_URL}"

    with pytest.raises(nglseg.DecodeError):
        decode_scene(url, session=session)


@pytest.mark.parametrize("x", [
    "https://ngl.flywire.ai/",
    "https://neuroglancer-demo.appspot.com/#!%7Blayers",
    "{'layers': []}",
    "",
])
def test_decode_errors(x):
    with pytest.raises(nglseg.DecodeError):
        decode_scene(x)


def test_decode_type_error():
    with pytest.raises(TypeError):
        decode_scene({"layers": []})
