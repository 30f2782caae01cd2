import os

from svg2png import environment


def test_load_environment_reads_dotenv_without_overriding(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("SVG2PNG_CONCURRENCY=3\nSVG2PNG_BROWSER=webkit\n", encoding="utf-8")
    monkeypatch.setenv("SVG2PNG_BROWSER", "firefox")
    # Registers the variable so that teardown removes the value loaded below.
    monkeypatch.setenv("SVG2PNG_CONCURRENCY", "")
    monkeypatch.delenv("SVG2PNG_CONCURRENCY")
    monkeypatch.delenv("SVG2PNG_ENV_FILE", raising=False)

    loaded = environment.load_environment(root=tmp_path, force=True)

    assert loaded == ((tmp_path / ".env").resolve(),)
    assert os.environ["SVG2PNG_CONCURRENCY"] == "3"
    assert os.environ["SVG2PNG_BROWSER"] == "firefox"


def test_load_environment_is_cached(tmp_path, monkeypatch):
    monkeypatch.delenv("SVG2PNG_ENV_FILE", raising=False)
    first = environment.load_environment(root=tmp_path, force=True)

    (tmp_path / ".env").write_text("SVG2PNG_FORMAT=jpeg\n", encoding="utf-8")

    assert environment.load_environment(root=tmp_path) == first
