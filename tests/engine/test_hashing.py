import hashlib

import pytest

from artifactcheck.engine.hashing import (
    DEFAULT_ALGORITHM,
    digest_many,
    file_digest,
    validate_algorithm,
)
from artifactcheck.errors import ArtifactIOError, ConfigError


def test_default_is_uppercase_sha1(tmp_path):
    p = tmp_path / "a.bin"
    p.write_bytes(b"hello")
    assert DEFAULT_ALGORITHM == "sha1"
    assert file_digest(str(p)) == hashlib.sha1(b"hello").hexdigest().upper()


def test_large_file_streams_in_chunks(tmp_path):
    data = bytes(range(256)) * 1024  # 256 KiB, several read chunks
    p = tmp_path / "big.bin"
    p.write_bytes(data)
    assert file_digest(str(p), "sha256") == hashlib.sha256(data).hexdigest().upper()


def test_empty_file_has_a_digest(tmp_path):
    p = tmp_path / "empty"
    p.write_bytes(b"")
    assert file_digest(str(p)) == "DA39A3EE5E6B4B0D3255BFEF95601890AFD80709"


def test_binary_content_digest(tmp_path):
    p = tmp_path / "x"
    p.write_bytes(b"\x00\xff" * 10)
    assert file_digest(str(p)) == hashlib.sha1(b"\x00\xff" * 10).hexdigest().upper()


def test_missing_file_raises_artifact_io_error(tmp_path):
    missing = tmp_path / "nope.txt"
    with pytest.raises(ArtifactIOError) as ei:
        file_digest(str(missing))
    assert ei.value.path == str(missing)
    assert "cannot read artifact" in str(ei.value)


def test_directory_is_not_readable_as_artifact(tmp_path):
    with pytest.raises(ArtifactIOError):
        file_digest(str(tmp_path))


@pytest.mark.parametrize("given,expected", [("SHA1", "sha1"), (" sha256 ", "sha256")])
def test_validate_algorithm_normalizes(given, expected):
    assert validate_algorithm(given) == expected


@pytest.mark.parametrize("bad", ["md5", "", None, "sha512"])
def test_validate_algorithm_rejects_unknown(bad):
    with pytest.raises(ConfigError):
        validate_algorithm(bad)


def _files(tmp_path, n):
    paths = []
    for i in range(n):
        p = tmp_path / f"f{i}.bin"
        p.write_bytes(f"content-{i}".encode())
        paths.append(str(p))
    return paths


def test_digest_many_hashes_each_path_once(tmp_path, monkeypatch):
    import artifactcheck.engine.hashing as mod

    paths = _files(tmp_path, 5)
    expected = {p: file_digest(p) for p in paths}
    seen = []
    real = mod.file_digest

    def counting(path, algorithm="sha1"):
        seen.append(path)
        return real(path, algorithm)

    monkeypatch.setattr(mod, "file_digest", counting)
    got = digest_many(paths + paths[:2], workers=3)
    assert got == expected
    assert sorted(seen) == sorted(paths)


def test_digest_many_without_paths():
    assert digest_many([], workers=4) == {}


@pytest.mark.parametrize("workers", [1, 4])
def test_digest_many_raises_first_unreadable_path_in_input_order(tmp_path, workers):
    good = _files(tmp_path, 3)
    late = str(tmp_path / "a-missing.bin")
    early = str(tmp_path / "z-missing.bin")
    with pytest.raises(ArtifactIOError) as ei:
        digest_many([good[0], early, good[1], late, good[2]], workers=workers)
    assert ei.value.path == early
