"""Tests for the confseek command-line interface."""

import json

import pytest
import yaml
from confseek.cli import main

PLAINTEXT = '{"token": "abc"}'


def key_from(output: str) -> str:
    return next(line.split(": ", 1)[1] for line in output.splitlines() if line.startswith("Key: "))


class TestConvertCommand:
    """Test the convert subcommand."""

    def test_convert(self, tmp_path, capsys):
        """Test converting JSON to YAML."""
        source = tmp_path / "app.json"
        source.write_text(json.dumps({"name": "app", "port": 1}))

        assert main(["convert", str(source), str(tmp_path / "app.yaml")]) == 0
        assert yaml.safe_load((tmp_path / "app.yaml").read_text()) == {"name": "app", "port": 1}
        assert "Converted" in capsys.readouterr().out

    def test_convert_error_exit_code(self, tmp_path, capsys):
        """Test configuration errors exit with 1 and report on stderr."""
        assert main(["convert", str(tmp_path / "missing.json"), str(tmp_path / "out.yaml")]) == 1
        assert "Error:" in capsys.readouterr().err


class TestEncryptionCommands:
    """Test the encrypt and decrypt subcommands."""

    def test_encrypt_then_decrypt(self, tmp_path, capsys):
        """Test a round trip through the CLI prunes ciphertext by default."""
        path = tmp_path / "app.json"
        path.write_text(PLAINTEXT)

        assert main(["encrypt", str(path), "--prune"]) == 0
        key = key_from(capsys.readouterr().out)
        encrypted = tmp_path / "app.json.encrypted"
        assert encrypted.exists()
        assert not path.exists()

        assert main(["decrypt", str(encrypted), "--key", key]) == 0
        assert path.read_text() == PLAINTEXT
        assert not encrypted.exists()

    def test_decrypt_keep(self, tmp_path, capsys):
        """Test --keep leaves the encrypted file in place."""
        path = tmp_path / "app.json"
        path.write_text(PLAINTEXT)
        main(["encrypt", str(path), "--prune"])
        key = key_from(capsys.readouterr().out)

        assert main(["decrypt", str(tmp_path / "app.json.encrypted"), "--key", key, "--keep"]) == 0
        assert (tmp_path / "app.json.encrypted").exists()

    def test_encrypt_directory_with_glob(self, tmp_path, capsys):
        """Test encrypting matching files in a directory with one shared key."""
        (tmp_path / "a.json").write_text(PLAINTEXT)
        (tmp_path / "b.json").write_text(PLAINTEXT)
        (tmp_path / "notes.txt").write_text("skip")
        nested = tmp_path / "nested"
        nested.mkdir()
        (nested / "c.json").write_text(PLAINTEXT)

        assert main(["encrypt", str(tmp_path), "--glob", "*.json"]) == 0
        output = capsys.readouterr().out

        assert output.count("Key: ") == 1
        assert (tmp_path / "a.json.encrypted").exists()
        assert (tmp_path / "b.json.encrypted").exists()
        assert not (tmp_path / "notes.txt.encrypted").exists()
        assert not (nested / "c.json.encrypted").exists()

    def test_recursive_directory_round_trip(self, tmp_path, capsys):
        """Test --recursive descends into subdirectories both ways."""
        nested = tmp_path / "nested"
        nested.mkdir()
        (tmp_path / "a.json").write_text(PLAINTEXT)
        (nested / "c.json").write_text(PLAINTEXT)

        assert main(["encrypt", str(tmp_path), "--recursive", "--prune"]) == 0
        key = key_from(capsys.readouterr().out)
        assert (nested / "c.json.encrypted").exists()

        assert main(["decrypt", str(tmp_path), "--key", key, "--recursive"]) == 0
        assert (nested / "c.json").read_text() == PLAINTEXT
        assert (tmp_path / "a.json").read_text() == PLAINTEXT

    def test_decrypt_wrong_key(self, tmp_path, capsys):
        """Test a bad key exits with 1."""
        path = tmp_path / "app.json"
        path.write_text(PLAINTEXT)
        main(["encrypt", str(path), "--prune"])
        capsys.readouterr()

        wrong = "base64:" + "A" * 43 + "="
        assert main(["decrypt", str(tmp_path / "app.json.encrypted"), "--key", wrong]) == 1
        assert "Failed to decrypt" in capsys.readouterr().err

    def test_decrypt_requires_key(self, tmp_path):
        """Test decrypt without --key is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            main(["decrypt", str(tmp_path / "x.encrypted")])
        assert exc_info.value.code == 2
