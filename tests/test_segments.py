import json

import numpy as np
import pandas as pd
import pytest

import nglseg
from nglseg.ngl import SceneRefKind, classify_scene_ref


@pytest.mark.parametrize("ids", [
    [10950626347, 10952282491, 13307888342],
    np.array([720575940623979522, 720575940623979523], dtype=np.uint64),
    pd.Series([1, 2, 3]),
    [5],
])
def test_numeric_identity(ids):
    res = nglseg.ngl_segments(ids, as_text=False)
    assert np.array_equal(res, np.asarray(ids))


def test_numeric_as_text():
    res = nglseg.ngl_segments([10950626347, 1.0950626348e10], as_text=True)
    assert res.tolist() == ["10950626347", "10950626348"]

    assert nglseg.ngl_segments(10950626347, as_text=True).tolist() == ["10950626347"]


def test_literal_ids_are_not_decoded(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("Scene decoding should not be attempted")

    monkeypatch.setattr(nglseg.ngl.segments, "read_scene", fail)
    monkeypatch.setattr(nglseg.ngl.layers, "decode_scene", fail)

    ids = ["10950626347", "10952282491", "13307888342"]
    assert nglseg.ngl_segments(ids, as_text=True).tolist() == ids

    res = nglseg.ngl_segments(ids)
    assert res.dtype == np.uint64
    assert res.tolist() == [10950626347, 10952282491, 13307888342]


def test_large_ids_are_exact():
    res = nglseg.ngl_segments(["720575940623979522"])
    assert int(res[0]) == 720575940623979522

    res = nglseg.ngl_segments("720575940623979522", as_text=True)
    assert res.tolist() == ["720575940623979522"]


def test_scene_sources(scene_source):
    assert nglseg.ngl_segments(scene_source, as_text=True,
                               include_hidden=False).tolist() == ["1", "2", "3"]
    assert nglseg.ngl_segments(scene_source, as_text=True,
                               include_hidden=True).tolist() == ["1", "2", "3", "4"]


def test_scene_numeric(scene):
    res = nglseg.ngl_segments(scene, include_hidden=False)
    assert res.dtype == np.uint64
    assert res.tolist() == [1, 2, 3]


def test_hidden_by_default(scene):
    # Hidden segments are included unless asked otherwise
    assert len(nglseg.ngl_segments(scene)) == 4


def test_hidden_prefix(scene):
    scene["layers"][1]["segments"] = ["1", "!2", "3"]
    scene["layers"][1].pop("hiddenSegments")

    assert nglseg.ngl_segments(scene, as_text=True,
                               include_hidden=False).tolist() == ["1", "3"]
    assert nglseg.ngl_segments(scene, as_text=True,
                               include_hidden=True).tolist() == ["1", "3", "2"]


def test_duplicates_collapse(scene):
    scene["layers"][1]["segments"] = ["3", "1", "3"]
    scene["layers"][1]["hiddenSegments"] = ["1", "4"]

    assert nglseg.ngl_segments(scene, as_text=True).tolist() == ["3", "1", "4"]


def test_only_hidden_segments(scene):
    scene["layers"][1]["segments"] = []

    with pytest.raises(nglseg.ResolutionError):
        nglseg.ngl_segments(scene, include_hidden=False)

    assert nglseg.ngl_segments(scene, as_text=True).tolist() == ["4"]


def test_multiple_segment_layers(scene):
    scene["layers"].append({"type": "segmentation",
                            "source": "precomputed://gs://fafb-ffn1",
                            "segments": ["10950626347"],
                            "name": "FFN1"})

    with pytest.raises(nglseg.ResolutionError) as e:
        nglseg.ngl_segments(scene)

    assert e.value.layers == ["Production segmentation", "FFN1"]
    assert "Production segmentation" in str(e.value)
    assert "FFN1" in str(e.value)


def test_unnamed_layers_are_numbered(scene):
    for l in scene["layers"]:
        l.pop("name")
    scene["layers"][0]["segments"] = ["5"]

    with pytest.raises(nglseg.ResolutionError) as e:
        nglseg.ngl_segments(scene)

    assert e.value.layers == ["layer 1", "layer 2"]


def test_no_segments(scene):
    scene["layers"][1]["segments"] = []
    scene["layers"][1]["hiddenSegments"] = []

    with pytest.raises(nglseg.ResolutionError, match="No segments"):
        nglseg.ngl_segments(scene)


def test_no_layers():
    with pytest.raises(nglseg.ResolutionError, match="Cannot find layers"):
        nglseg.ngl_segments({"position": [1, 2, 3]})


def test_legacy_layer_dict():
    scene = {"layers": {"fafb": {"type": "image", "source": "brainmaps://fafb"},
                        "ffn1": {"type": "segmentation",
                                 "source": "brainmaps://ffn1",
                                 "segments": ["10950626347", "10952282491"]}}}
    assert nglseg.ngl_segments(scene).tolist() == [10950626347, 10952282491]


def test_invalid_json():
    with pytest.raises(nglseg.DecodeError):
        nglseg.ngl_segments("{layers: ")


def test_not_a_dict():
    with pytest.raises(nglseg.FormatError):
        nglseg.ngl_segments(json.dumps([{"segments": ["1"]}]))


@pytest.mark.parametrize("x", [None, [1, "a"], {"a", 1}])
def test_unsupported_input(x):
    with pytest.raises(nglseg.FormatError):
        nglseg.ngl_segments(x)


@pytest.mark.parametrize("x,kind", [
    ([1, 2], SceneRefKind.NUMERIC),
    (np.array([1, 2], dtype=np.uint64), SceneRefKind.NUMERIC),
    (12345, SceneRefKind.NUMERIC),
    (["1", " 2 "], SceneRefKind.LITERAL_IDS),
    ("12345", SceneRefKind.LITERAL_IDS),
    ([], SceneRefKind.LITERAL_IDS),
    ("https://ngl.flywire.ai/?json_url=https://x.org/1", SceneRefKind.URL),
    (["http://ngl.flywire.ai/#!%7B%7D"], SceneRefKind.URL),
    ('{"layers": []}', SceneRefKind.RAW_JSON),
    (['{"layers":', '[]}'], SceneRefKind.RAW_JSON),
    ({"layers": []}, SceneRefKind.PARSED),
])
def test_classify_scene_ref(x, kind):
    assert classify_scene_ref(x) is kind


def test_classify_file(tmp_path):
    fp = tmp_path / "scene.json"
    fp.write_text("{}")
    assert classify_scene_ref(fp) is SceneRefKind.FILE
    assert classify_scene_ref(str(fp)) is SceneRefKind.FILE

    with pytest.raises(FileNotFoundError):
        classify_scene_ref(tmp_path / "missing.json")


def test_ngl_layers(scene, scene_source):
    layers = nglseg.ngl_layers(scene_source)
    assert layers == scene["layers"]


def test_ngl_layers_missing():
    assert nglseg.ngl_layers({"position": [0, 0, 0]}) is None


def test_ngl_layers_format_error():
    with pytest.raises(nglseg.FormatError):
        nglseg.ngl_layers("12345")


def test_layer_summary(scene):
    summary = nglseg.ngl_layer_summary(scene)
    assert summary.shape == (2, 4)
    assert summary["name"].tolist() == ["fafb_v14", "Production segmentation"]
    assert summary["n"].tolist() == [1, 2]


def test_segmentation_layer(scene):
    layer = nglseg.ngl_segmentation(scene)
    assert layer["name"] == "Production segmentation"

    # Layers without source are ignored
    scene["layers"][1]["source"] = None
    assert nglseg.ngl_segmentation(scene) is None


def test_segmentation_layer_source_dict(scene):
    scene["layers"][1]["source"] = {"url": "graphene://https://x.org/seg"}
    assert nglseg.ngl_layer_summary(scene)["source"].tolist()[1] == "graphene://https://x.org/seg"
    assert nglseg.ngl_segmentation(scene)["name"] == "Production segmentation"


def test_layers_with_same_name(scene):
    scene["layers"][0] = {"type": "segmentation", "name": "seg",
                          "source": "precomputed://gs://fafb-ffn1",
                          "segments": ["1", "2"]}
    scene["layers"][1]["name"] = "seg"
    scene["layers"][1]["segments"] = ["9"]

    with pytest.raises(nglseg.ResolutionError) as e:
        nglseg.ngl_segments(scene, as_text=True)

    assert e.value.layers == ["seg (layer 1)", "seg (layer 2)"]
    assert "seg (layer 2)" in str(e.value)


@pytest.mark.parametrize("as_text", [True, False])
@pytest.mark.parametrize("bad", ["../escaped", "12a", "", "1.5"])
def test_invalid_segment_ids(scene, bad, as_text):
    scene["layers"][1]["segments"] = ["1", bad]

    with pytest.raises(nglseg.FormatError, match="Production segmentation"):
        nglseg.ngl_segments(scene, as_text=as_text)


def test_invalid_hidden_segment_ids(scene):
    scene["layers"][1]["segments"] = ["1", "!../escaped"]

    with pytest.raises(nglseg.FormatError):
        nglseg.ngl_segments(scene, as_text=True)

    # Dropped hidden segments are not used
    assert nglseg.ngl_segments(scene, as_text=True,
                               include_hidden=False).tolist() == ["1"]


def test_invalid_ids_are_not_fetched(scene, fetcher, tmp_path):
    scene["layers"][1]["segments"] = ["1", "../escaped"]
    savedir = tmp_path / "meshes"

    with pytest.raises(nglseg.FormatError):
        nglseg.read_cloudvolume_meshes(scene, savedir=savedir, fetcher=fetcher)

    assert fetcher.calls == []
    assert not (tmp_path / "escaped.obj").exists()


def test_missing_scene_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        nglseg.ngl_segments(tmp_path / "missing.json")

    # A str can't be told apart from JSON text
    with pytest.raises(nglseg.DecodeError):
        nglseg.ngl_segments(str(tmp_path / "missing.json"))


def test_scene_file_not_utf8(tmp_path):
    fp = tmp_path / "scene.json"
    fp.write_bytes(b'\xff\xfe{"layers": []}')

    with pytest.raises(nglseg.DecodeError):
        nglseg.ngl_segments(fp)
