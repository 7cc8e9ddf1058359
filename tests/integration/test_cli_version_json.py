from tests.integration._cli import run_cli


def test_version_json_envelope(tmp_path):
    code, out = run_cli(tmp_path, "version", "--json")
    assert code == 0
    assert out["ok"] is True
    assert out["command"] == "version"
    assert out["data"]["version"] == "0.1.0"
