import json

import pytest

from passthrough_vlm.models.secrets import CredentialStore, PLACEHOLDER_KEY, redact


@pytest.fixture
def store_path(tmp_path, monkeypatch):
    monkeypatch.delenv("PVLM_TEST_API_KEY", raising=False)
    return tmp_path / "secrets.json"


def make_store(path):
    return CredentialStore(path, env_var="PVLM_TEST_API_KEY")


class TestCredentialStore:
    """Test suite for the JSON-backed API key store"""

    def test_no_file_no_env(self, store_path):
        store = make_store(store_path)
        assert store.get() is None
        assert not store.has_key()

    def test_env_fallback(self, store_path, monkeypatch):
        monkeypatch.setenv("PVLM_TEST_API_KEY", "sk-or-from-env")
        store = make_store(store_path)
        assert store.get() == "sk-or-from-env"
        assert store.has_key()

    def test_file_wins_over_env(self, store_path, monkeypatch):
        monkeypatch.setenv("PVLM_TEST_API_KEY", "sk-or-from-env")
        make_store(store_path).set("sk-or-from-file")
        assert make_store(store_path).get() == "sk-or-from-file"

    def test_set_persists(self, store_path):
        store = make_store(store_path)
        store.set("sk-or-abc123")

        assert store.get() == "sk-or-abc123"
        saved = json.loads(store_path.read_text())
        assert saved["openrouter_api_key"] == "sk-or-abc123"
        assert make_store(store_path).get() == "sk-or-abc123"

    def test_set_leaves_no_temp_file(self, store_path):
        make_store(store_path).set("sk-or-abc123")
        assert [p.name for p in store_path.parent.iterdir()] == ["secrets.json"]

    def test_set_creates_parent_dir(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PVLM_TEST_API_KEY", raising=False)
        path = tmp_path / "nested" / "dir" / "secrets.json"
        make_store(path).set("sk-or-abc123")
        assert path.exists()

    def test_overwrite(self, store_path):
        store = make_store(store_path)
        store.set("first")
        store.set("second")
        assert make_store(store_path).get() == "second"

    def test_placeholder_is_not_a_key(self, store_path):
        store = make_store(store_path)
        store.set(PLACEHOLDER_KEY)
        assert store.get() == PLACEHOLDER_KEY
        assert not store.has_key()

    def test_invalid_json_falls_back_to_empty(self, store_path, caplog):
        store_path.write_text("{not json")
        store = make_store(store_path)
        with caplog.at_level("WARNING"):
            assert store.get() is None
        assert "Error loading secrets" in caplog.text

    def test_non_utf8_file_falls_back_to_empty(self, store_path, monkeypatch):
        store_path.write_bytes(b'{"openrouter_api_key": "\xff\xfe"}')
        monkeypatch.setenv("PVLM_TEST_API_KEY", "sk-or-from-env")
        store = make_store(store_path)
        assert store.get() == "sk-or-from-env"
        assert store.has_key()

    def test_saved_key_is_redacted_in_logs(self, store_path, caplog):
        with caplog.at_level("INFO", logger="passthrough_vlm.models.secrets"):
            make_store(store_path).set("sk-or-v1-secretsecret")
        assert "sk-or-v1..." in caplog.text
        assert "secretsecret" not in caplog.text

    def test_empty_file(self, store_path):
        store_path.write_text("   ")
        assert make_store(store_path).get() is None

    def test_unknown_fields_ignored(self, store_path):
        store_path.write_text(json.dumps({"openrouter_api_key": "sk-or-x", "other": 1}))
        assert make_store(store_path).get() == "sk-or-x"


class TestRedact:

    def test_redact(self):
        assert redact("sk-or-v1-abcdefghijkl") == "sk-or-v1..."

    def test_redact_empty(self):
        assert redact(None) == "<none>"
        assert redact("") == "<none>"
