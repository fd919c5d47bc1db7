import os
import shutil

import pytest

import nglseg
from nglseg.io import fetch_artifacts, artifact_path


def test_artifact_path(tmp_path):
    assert artifact_path(tmp_path, 720575940623979522) == str(tmp_path / "720575940623979522.obj")
    assert artifact_path(tmp_path, "1", ext=".ply") == str(tmp_path / "1.ply")


def test_fetch_all(tmp_path, fetcher):
    files = fetch_artifacts(["3", "1", "2"], fetcher, savedir=tmp_path)

    assert list(files) == ["3", "1", "2"]
    assert fetcher.fetched == ["3", "1", "2"]
    for seg, fp in files.items():
        assert fp == str(tmp_path / f"{seg}.obj")
        assert os.path.isfile(fp)


def test_fetch_numeric_ids(tmp_path, fetcher):
    files = fetch_artifacts([720575940623979522, 10950626347], fetcher,
                            savedir=tmp_path)
    assert list(files) == ["720575940623979522", "10950626347"]


def test_idempotent(tmp_path, make_fetcher):
    first = make_fetcher()
    files1 = fetch_artifacts(["1", "2", "3"], first, savedir=tmp_path)

    second = make_fetcher()
    files2 = fetch_artifacts(["1", "2", "3"], second, savedir=tmp_path)

    assert len(first.calls) == 3
    assert second.calls == []
    assert files1 == files2


def test_resume(tmp_path, fetcher):
    (tmp_path / "2.obj").write_text("")

    files = fetch_artifacts(["1", "2", "3"], fetcher, savedir=tmp_path)

    assert fetcher.fetched == ["1", "3"]
    assert list(files) == ["1", "2", "3"]


def test_force(tmp_path, make_fetcher):
    fetch_artifacts(["1", "2"], make_fetcher(), savedir=tmp_path)

    again = make_fetcher()
    fetch_artifacts(["1", "2"], again, savedir=tmp_path, force=True)
    assert again.fetched == ["1", "2"]


def test_partial_failure(tmp_path, make_fetcher):
    fetcher = make_fetcher(fail=["B"])

    files = fetch_artifacts(["A", "B", "C"], fetcher, savedir=tmp_path,
                            omit_failures=True)

    assert list(files) == ["A", "C"]
    assert fetcher.fetched == ["A", "B", "C"]


def test_fail_fast(tmp_path, make_fetcher):
    fetcher = make_fetcher(fail=["B"])

    with pytest.raises(nglseg.FetchError) as e:
        fetch_artifacts(["A", "B", "C"], fetcher, savedir=tmp_path,
                        omit_failures=False)

    assert e.value.segment_id == "B"
    assert isinstance(e.value.__cause__, ConnectionError)
    assert fetcher.fetched == ["A", "B"]
    # No rollback: what was fetched stays on disk
    assert (tmp_path / "A.obj").is_file()


def test_fetch_error_passes_through(tmp_path):
    def fetch(seg, filepath):
        raise nglseg.FetchError("Mesh not found", segment_id=seg)

    with pytest.raises(nglseg.FetchError, match="Mesh not found"):
        fetch_artifacts(["1"], fetch, savedir=tmp_path, omit_failures=False)

    assert fetch_artifacts(["1"], fetch, savedir=tmp_path) == {}


def test_interrupt_is_not_swallowed(tmp_path):
    def fetch(seg, filepath):
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        fetch_artifacts(["1", "2"], fetch, savedir=tmp_path, omit_failures=True)


def test_duplicates(tmp_path, fetcher):
    files = fetch_artifacts(["1", "2", "1"], fetcher, savedir=tmp_path,
                            force=True)
    assert list(files) == ["1", "2"]
    assert fetcher.fetched == ["1", "2"]


def test_creates_savedir(tmp_path, fetcher):
    savedir = tmp_path / "nested" / "meshes"
    files = fetch_artifacts(["1"], fetcher, savedir=savedir)

    assert savedir.is_dir()
    assert files["1"] == str(savedir / "1.obj")


def test_temporary_savedir(fetcher):
    files = fetch_artifacts(["1"], fetcher)
    savedir = os.path.dirname(files["1"])
    try:
        assert os.path.basename(savedir).startswith("nglseg_")
        # Directory is kept after the call
        assert os.path.isfile(files["1"])
    finally:
        shutil.rmtree(savedir)


def test_setup_error(tmp_path, fetcher):
    blocker = tmp_path / "file"
    blocker.write_text("")

    with pytest.raises(nglseg.SetupError):
        fetch_artifacts(["1"], fetcher, savedir=blocker / "meshes",
                        omit_failures=True)

    assert fetcher.calls == []


def test_fetch_not_callable(tmp_path):
    with pytest.raises(TypeError):
        fetch_artifacts(["1"], "not a function", savedir=tmp_path)


def test_custom_extension(tmp_path, fetcher):
    files = fetch_artifacts(["1"], fetcher, savedir=tmp_path, ext="ply")
    assert files["1"].endswith("1.ply")


def test_progress_ticks_skipped_ids(tmp_path, fetcher, monkeypatch):
    seen = []
    tqdm = nglseg.config.tqdm

    def spy(iterable, **kwargs):
        for i in tqdm(iterable, **kwargs):
            seen.append(i)
            yield i

    monkeypatch.setattr(nglseg.config, "tqdm", spy)
    (tmp_path / "2.obj").write_text("")

    fetch_artifacts(["1", "2", "3"], fetcher, savedir=tmp_path)

    assert seen == ["1", "2", "3"]
    assert fetcher.fetched == ["1", "3"]
