import json

from heirbox.core.bundler import BundleReport, NullBundler, ParamsFileBundler


def test_null_bundler():
    report = NullBundler().bundle({"indexTag": "x"})
    assert report == BundleReport()
    assert not report.has_errors
    assert not report.has_warnings


def test_params_file_bundler_writes_json(tmp_path):
    path = tmp_path / "out" / "params.json"
    report = ParamsFileBundler(path).bundle({"indexTag": "abc", "kdf": "argon2"})

    assert report.errors == []
    assert report.warnings == []
    assert json.loads(path.read_text()) == {"indexTag": "abc", "kdf": "argon2"}


def test_params_file_bundler_reports_write_errors(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a dir")

    report = ParamsFileBundler(blocker / "params.json").bundle({})

    assert report.has_errors
    assert "cannot write build parameters" in report.errors[0]


def test_params_file_bundler_warns_inside_dist(tmp_path):
    dist = tmp_path / "dist"
    dist.mkdir()
    report = ParamsFileBundler(dist / "params.json", dist_dir=dist).bundle({})

    assert not report.has_errors
    assert report.has_warnings
    assert (dist / "params.json").exists()
