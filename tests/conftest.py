import json

from pathlib import Path
from urllib.parse import quote

import pytest
import trimesh as tm

import nglseg


@pytest.fixture(autouse=True)
def hide_pbars():
    nglseg.set_pbars(hide=True)
    yield
    nglseg.set_pbars(hide=False)


@pytest.fixture
def scene():
    """Scene with an image layer and one segmentation layer."""
    return {
        "layers": [
            {"type": "image",
             "source": "precomputed://gs://neuroglancer-fafb-data/fafb_v14/fafb_v14_clahe",
             "name": "fafb_v14"},
            {"type": "segmentation_with_graph",
             "source": "graphene://https://prod.flywire-daf.com/segmentation/1.0/fly_v31",
             "segments": ["1", "2", "3"],
             "hiddenSegments": ["4"],
             "name": "Production segmentation"},
        ],
        "navigation": {"pose": {"position": {"voxelCoordinates": [1, 2, 3]}}},
    }


@pytest.fixture
def scene_url(scene):
    return ("https://neuroglancer-demo.appspot.com/#!"
            + quote(json.dumps(scene), safe=''))


@pytest.fixture(
    params=["dict", "jsonstr", "Path", "pathstr", "url", "lines"]
)
def scene_source(request, scene, scene_url, tmp_path):
    if request.param == "dict":
        yield scene
    elif request.param == "jsonstr":
        yield json.dumps(scene)
    elif request.param in ("Path", "pathstr"):
        fp = tmp_path / "scene.json"
        fp.write_text(json.dumps(scene))
        yield fp if request.param == "Path" else str(fp)
    elif request.param == "url":
        yield scene_url
    elif request.param == "lines":
        yield json.dumps(scene, indent=2).split("\n")
    else:
        raise ValueError("Unknown parameter")


class FakeFetcher:
    """Stands in for the remote mesh service.

    Writes a small box mesh for every segment except those in ``fail``.
    """

    def __init__(self, fail=()):
        self.fail = {str(f) for f in fail}
        self.calls = []

    def __call__(self, segment_id, filepath):
        self.calls.append((segment_id, filepath))
        if segment_id in self.fail:
            raise ConnectionError(f"Server refused segment {segment_id}")
        Path(filepath).write_text(tm.creation.box().export(file_type="obj"))

    @property
    def fetched(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def make_fetcher():
    return FakeFetcher
