from pathlib import Path

import pytest

from storykit.exceptions import ConfigurationError
from storykit.settings import PublishSettings, Settings


CONFIG = """
projectName: Election Night
dest: build
assetPath:
  domain: https://media.example.com/
projectInitDate:
  year: "2018"
  month: "11"
publish:
  simulate: true
"""


def test_load_reads_camel_case_keys(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text(CONFIG, encoding="utf-8")

    settings = Settings.load(path)

    assert settings.project_name == "Election Night"
    assert settings.dest_dir == tmp_path / "build"
    assert settings.asset_path.domain == "https://media.example.com/"
    assert settings.project_init_date.year == "2018"
    assert settings.publish.simulate is True
    assert settings.publish.story_root == "machinist/dist"
    assert settings.publish.timeout_seconds == 300.0


def test_load_keeps_unquoted_dates_for_preflight(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("projectName: x\nprojectInitDate:\n  year: 2018\n  month: 1\n", encoding="utf-8")

    settings = Settings.load(path)

    assert settings.project_init_date.year == 2018
    assert settings.project_init_date.month == 1


def test_load_uses_environment_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "story.yml"
    path.write_text("projectName: From Env\n", encoding="utf-8")
    monkeypatch.setenv("STORYKIT_CONFIG", str(path))

    assert Settings.load().project_name == "From Env"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Settings.load(tmp_path / "nope.yml")


@pytest.mark.parametrize("body", ["dest: www\n", "projectName: '  '\n", "- a\n- b\n", "projectName: [unclosed\n"])
def test_invalid_configuration(tmp_path: Path, body: str) -> None:
    path = tmp_path / "config.yml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        Settings.load(path)


def test_settings_are_frozen(settings) -> None:
    with pytest.raises(Exception):
        settings.dest = "elsewhere"


def test_remote_store_reads_environment(settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASSETS_BUCKET_NAME", "cdn-bucket")
    monkeypatch.setenv("ASSETS_AWS_DEFAULT_REGION", "us-west-2")
    monkeypatch.setenv("BUCKET_NAME", "story-bucket")

    assets = settings.assets_store
    story = settings.story_store

    assert assets.bucket == "cdn-bucket"
    assert assets.region == "us-west-2"
    assert story.bucket == "story-bucket"
    assert assets.timeout_seconds == story.timeout_seconds == 300.0


def test_missing_bucket_raises(settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BUCKET_NAME", raising=False)

    with pytest.raises(ConfigurationError) as excinfo:
        settings.story_store.bucket

    assert excinfo.value.details == {"variable": "BUCKET_NAME"}


def test_models_use_config_dict() -> None:
    assert Settings.model_config["frozen"] is True
    assert Settings.model_config["populate_by_name"] is True
    assert PublishSettings.model_config["frozen"] is True
    assert PublishSettings(storyRoot="/a/b/").story_root == "a/b"
    assert PublishSettings(story_root="c").story_root == "c"
