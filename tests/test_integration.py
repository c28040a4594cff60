"""Integration tests for ConfigManager."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
import yaml
from confseek import ConfigManager
from confseek import SearchOptions
from confseek import SearchStrategy
from confseek import interpolate


class TestConfigIntegration:
    """Integration tests for realistic configuration scenarios."""

    @pytest.fixture
    def workspace(self):
        """Create a temporary workspace directory."""
        with TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    @pytest.fixture
    def manager(self):
        """Create ConfigManager that searches up to the project root."""
        return ConfigManager(SearchOptions(strategy=SearchStrategy.PROJECT))

    def test_carriers_directory(self, manager, workspace):
        """Test loading a directory of carrier definitions into one module."""
        carriers = workspace / "carriers"
        carriers.mkdir()
        (carriers / "ups.json").write_text(json.dumps({"name": "UPS", "rates": {"domestic": 5.99}}))
        (carriers / "fedex.yaml").write_text(yaml.safe_dump({"code": "fedex"}))

        manager.load_directory(carriers, "carriers")

        assert manager.get("carriers", "ups.name") == "UPS"
        assert manager.get("carriers", "ups.rates.domestic") == 5.99
        assert manager.get("carriers", "fedex.code") == "fedex"

    def test_combine_environment_overrides(self, manager, workspace):
        """Test deep-combining base and production configuration."""
        (workspace / "a.json").write_text(json.dumps({"db": {"host": "localhost", "port": 3306}}))
        (workspace / "b.json").write_text(json.dumps({"db": {"host": "prod"}}))

        manager.combine(workspace / "out.json", [workspace / "a.json", workspace / "b.json"], deep=True)

        assert json.loads((workspace / "out.json").read_text()) == {"db": {"host": "prod", "port": 3306}}

    def test_interpolate_host(self, monkeypatch):
        """Test default and environment-provided host values."""
        monkeypatch.delenv("HOST", raising=False)
        assert interpolate("${HOST:-localhost}") == "localhost"

        monkeypatch.setenv("HOST", "db1")
        assert interpolate("${HOST:-localhost}") == "db1"

    def test_realistic_workflow_edit_and_save(self, manager, workspace):
        """Test discovering a project config from a subdirectory, editing and saving it."""
        # 1. Project root holds a marker and a YAML rc file
        (workspace / "package.json").write_text(json.dumps({"name": "shop"}))
        (workspace / ".shoprc.yaml").write_text(yaml.safe_dump({"currency": "EUR", "features": ["cart"]}))
        src = workspace / "src" / "checkout"
        src.mkdir(parents=True)

        # 2. Search from deep inside the project
        result = manager.search("shop", src)
        assert Path(result.filepath).name == ".shoprc.yaml"

        # 3. Edit and persist
        manager.set("shop", "currency", "USD").push("shop", "features", "wishlist")
        assert manager.is_dirty("shop")
        manager.save("shop")

        # 4. A fresh manager sees the saved values
        fresh = ConfigManager(SearchOptions(strategy=SearchStrategy.PROJECT))
        fresh.search("shop", src)
        assert fresh.get("shop") == {"currency": "USD", "features": ["cart", "wishlist"]}

    def test_package_json_config_with_encryption(self, manager, workspace):
        """Test reading package.json config and encrypting a secrets file beside it."""
        (workspace / "package.json").write_text(json.dumps({"name": "shop", "shop": {"secrets": "secrets.json"}}))
        (workspace / "secrets.json").write_text(json.dumps({"api_key": "k"}))

        manager.search("shop", workspace)
        secrets_path = workspace / manager.string("shop", "secrets")

        result = manager.encrypt(secrets_path, prune=True)
        assert not secrets_path.exists()

        manager.decrypt(result.path, result.key)
        manager.load(secrets_path, "secrets")
        assert manager.get("secrets", "api_key") == "k"

    def test_modules_are_independent(self, manager, workspace):
        """Test modules loaded side by side do not affect each other."""
        (workspace / "composer.json").write_text("{}")
        (workspace / ".alpharc.json").write_text(json.dumps({"value": 1}))
        (workspace / ".betarc.json").write_text(json.dumps({"value": 2}))

        manager.search("alpha", workspace)
        manager.search("beta", workspace)
        manager.set("alpha", "value", 10)

        assert manager.get("beta", "value") == 2
        assert manager.diff_modules("alpha", "beta")["changed"] == {"value": {"from": 10, "to": 2}}
