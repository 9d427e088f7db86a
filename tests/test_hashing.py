# Tests for ccjk_config.utils.hashing
# Content fingerprints used by the polling watcher

from ccjk_config.utils.hashing import content_hash, file_hash, fingerprint


class TestContentHash:
    """Tests for content_hash."""

    def test_sha256_hex(self):
        assert len(content_hash("hello")) == 64

    def test_text_is_utf8(self):
        assert content_hash("配置") == content_hash("配置".encode("utf-8"))

    def test_different_content(self):
        assert content_hash("a") != content_hash("b")


class TestFileHash:
    """Tests for file_hash."""

    def test_existing_file(self, temp_dir):
        f = temp_dir / "settings.json"
        f.write_text("{}", encoding="utf-8")
        assert file_hash(f) == content_hash("{}")

    def test_missing_file(self, temp_dir):
        assert file_hash(temp_dir / "missing.json") is None

    def test_directory(self, temp_dir):
        assert file_hash(temp_dir) is None

    def test_larger_than_one_chunk(self, temp_dir):
        f = temp_dir / "big.bin"
        data = b"x" * 200_000
        f.write_bytes(data)
        assert file_hash(f) == content_hash(data)


class TestFingerprint:
    """Tests for fingerprint."""

    def test_fields(self, temp_dir):
        f = temp_dir / "state.json"
        f.write_text('{"a": 1}', encoding="utf-8")
        fp = fingerprint(f)
        assert fp.size == 8
        assert fp.digest == content_hash('{"a": 1}')
        assert fp.mtime_ns == f.stat().st_mtime_ns

    def test_same_size_content_change(self, temp_dir):
        f = temp_dir / "state.json"
        f.write_text('{"a": 1}', encoding="utf-8")
        before = fingerprint(f)
        f.write_text('{"a": 2}', encoding="utf-8")
        assert fingerprint(f) != before

    def test_missing(self, temp_dir):
        assert fingerprint(temp_dir / "missing.json") is None
