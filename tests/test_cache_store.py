import os
import stat

import pytest

from subcache.core.cache_store import CacheStore


def test_get_without_file_returns_empty(tmp_path):
    assert CacheStore(str(tmp_path / "cache.yaml")).get() == b""


def test_set_then_get(tmp_path):
    store = CacheStore(str(tmp_path / "cache.yaml"))

    store.set(b"proxies: []\n")

    assert store.get() == b"proxies: []\n"


def test_set_overwrites_longer_content(tmp_path):
    store = CacheStore(str(tmp_path / "cache.yaml"))
    store.set(b"rules:\n  - MATCH,DIRECT\n  - MATCH,REJECT\n")

    store.set(b"rules: []\n")

    assert store.get() == b"rules: []\n"


def test_set_into_missing_directory_raises(tmp_path):
    store = CacheStore(str(tmp_path / "missing" / "cache.yaml"))

    with pytest.raises(OSError):
        store.set(b"proxies: []\n")


def test_get_on_unreadable_path_returns_empty(tmp_path):
    # Reading a directory fails the same way an unreadable file does
    assert CacheStore(str(tmp_path)).get() == b""


def test_new_cache_file_honours_umask(tmp_path):
    path = tmp_path / "cache.yaml"
    old_umask = os.umask(0o027)
    try:
        CacheStore(str(path)).set(b"proxies: []\n")
    finally:
        os.umask(old_umask)

    assert stat.S_IMODE(os.stat(path).st_mode) == 0o666 & ~0o027
