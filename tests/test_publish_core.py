import gzip
import hashlib
import json

import pytest

from storykit.publish.cache import UploadCache
from storykit.publish.files import DEFAULT_CONTENT_TYPE, collect_files, guess_content_type, prepare_upload
from storykit.publish.publisher import Publisher
from storykit.publish.reporter import PublishEvent, PublishReport
from storykit.storage.local import LocalStorage
from tests.utils_files import write_file


def test_collect_files_filters_by_extension(tmp_path) -> None:
    for name in ("b/one.PNG", "a.json", "c.ai", "d.html", "e.bin"):
        write_file(tmp_path / name, "x")

    included = collect_files(tmp_path, include_ext=["png", ".json"])
    excluded = collect_files(tmp_path, exclude_ext=["ai", "html"])

    assert [item.relative for item in included] == ["a.json", "b/one.PNG"]
    assert [item.relative for item in excluded] == ["a.json", "b/one.PNG", "e.bin"]


def test_guess_content_type(tmp_path) -> None:
    assert guess_content_type(tmp_path / "a.png") == "image/png"
    assert guess_content_type(tmp_path / "a.csv") == "text/csv; charset=utf-8"
    assert guess_content_type(tmp_path / "a.unknownext") == DEFAULT_CONTENT_TYPE


def test_prepare_upload_gzip_is_stable(tmp_path) -> None:
    local = collect_files(write_file(tmp_path / "src" / "d.json", '{"a": 1}').parent)[0]

    first = prepare_upload(local, "k/d.json", ["json"])
    second = prepare_upload(local, "k/d.json", ["json"])
    plain = prepare_upload(local, "k/d.json")

    assert first.content_encoding == "gzip"
    assert gzip.decompress(first.body) == b'{"a": 1}'
    assert first.etag == second.etag == hashlib.md5(first.body).hexdigest()
    assert plain.content_encoding is None
    assert plain.body == b'{"a": 1}'


def test_upload_cache_persists(tmp_path) -> None:
    cache = UploadCache.for_bucket(tmp_path, "my bucket/1")
    cache.record("k", "etag")
    cache.save()

    assert cache.path.name == ".storykit-cache-my-bucket-1.json"
    reloaded = UploadCache.for_bucket(tmp_path, "my bucket/1")
    assert reloaded.hit("k", "etag")
    assert not reloaded.hit("k", "other")


def test_upload_cache_ignores_corrupt_file(tmp_path) -> None:
    (tmp_path / ".storykit-cache-b.json").write_text("{oops")
    assert UploadCache.for_bucket(tmp_path, "b").entries == {}


def test_sync_refuses_empty_prefix(tmp_path) -> None:
    publisher = Publisher(LocalStorage(tmp_path))
    with pytest.raises(ValueError, match="empty prefix"):
        list(publisher.sync("", []))


def test_simulated_sync_keeps_objects(tmp_path) -> None:
    storage = LocalStorage(tmp_path)
    storage.put("p/stale.txt", b"x", content_type="text/plain")

    events = list(Publisher(storage, simulate=True).sync("p/", []))

    assert events == [PublishEvent("p/stale.txt", "delete")]
    assert storage.head("p/stale.txt") is not None


def test_report_counts() -> None:
    report = PublishReport(target="s3://b")
    report.consume([PublishEvent("a", "create"), PublishEvent("b", "skip"), PublishEvent("c", "delete")])

    assert report.counts["create"] == 1
    assert report.written == 2
    assert report.keys("skip") == ["b"]
    report.log_summary()


def test_cache_file_is_json_mapping(tmp_path) -> None:
    cache = UploadCache(tmp_path / "c.json")
    cache.record("b", "2")
    cache.record("a", "1")
    cache.save()
    assert json.loads((tmp_path / "c.json").read_text()) == {"a": "1", "b": "2"}
