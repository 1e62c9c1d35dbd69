"""Tests for CLI functionality."""

import click
import pytest
from click.testing import CliRunner

from posprinter.cli import main, validate_profile, validate_target
from posprinter.config import load_config, save_config


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    """Keep the saved config inside the test's temporary directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr("posprinter.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("posprinter.config.CONFIG_FILE", config_dir / "config.json")
    return config_dir


@pytest.fixture
def out_file(tmp_path):
    return tmp_path / "out.bin"


class TestValidators:
    """Test click parameter callbacks."""

    def test_profile_canonical_name(self):
        """Profile names are normalized."""
        assert validate_profile(None, None, "tm-t20ii") == "TM-T20II"

    def test_unknown_profile(self):
        """Unknown profiles raise click.BadParameter."""
        with pytest.raises(click.BadParameter, match="Unknown printer profile"):
            validate_profile(None, None, "nope")

    def test_none_passes(self):
        """Omitted values stay None."""
        assert validate_profile(None, None, None) is None
        assert validate_target(None, None, None) is None

    def test_invalid_target(self):
        """Unparseable targets raise click.BadParameter."""
        with pytest.raises(click.BadParameter, match="Unsupported target scheme"):
            validate_target(None, None, "ftp://x")


class TestPrintCommands:
    """Test printing to a file target."""

    def test_text(self, runner, out_file):
        """text prints each line after ESC @."""
        result = runner.invoke(main, ["--target", str(out_file), "text", "Hello", "World"])
        assert result.exit_code == 0, result.output
        assert out_file.read_bytes() == b"\x1b@Hello\nWorld\n"
        assert "Printed 2 line(s)" in result.output

    def test_text_bold_centered_cut(self, runner, out_file):
        """Style options and cut are emitted."""
        result = runner.invoke(
            main, ["-t", str(out_file), "text", "TOTAL", "--bold", "--align", "center", "--cut"]
        )
        assert result.exit_code == 0, result.output
        assert out_file.read_bytes() == b"\x1b@\x1ba\x01\x1bE\x01TOTAL\n\x1bd\x03\x1dVA\x00"

    def test_barcode(self, runner, out_file):
        """barcode prints GS k with the computed check digit."""
        result = runner.invoke(main, ["-t", str(out_file), "barcode", "400638133393", "--type", "ean13"])
        assert result.exit_code == 0, result.output
        assert out_file.read_bytes().endswith(b"\x1dk\x43\x0d4006381333931")

    def test_invalid_barcode(self, runner, out_file):
        """Invalid barcode data exits with an error and prints nothing."""
        result = runner.invoke(main, ["-t", str(out_file), "barcode", "12AB", "--type", "ean13"])
        assert result.exit_code == 1
        assert "Invalid option" in result.output
        assert not out_file.exists() or out_file.read_bytes() == b""

    def test_qr_native(self, runner, out_file):
        """qr uses GS ( k on the default profile."""
        result = runner.invoke(main, ["-t", str(out_file), "qr", "https://example.com"])
        assert result.exit_code == 0, result.output
        assert b"\x1d(k" in out_file.read_bytes()

    def test_qr_raster(self, runner, out_file):
        """--raster prints a GS v 0 image."""
        result = runner.invoke(main, ["-t", str(out_file), "qr", "hello", "--raster"])
        assert result.exit_code == 0, result.output
        assert b"\x1dv0" in out_file.read_bytes()

    def test_cut_unsupported(self, runner, out_file):
        """cut on a profile without cutter fails."""
        result = runner.invoke(main, ["-t", str(out_file), "-p", "simple", "cut"])
        assert result.exit_code == 1
        assert "Unsupported" in result.output

    def test_partial_cut(self, runner, out_file):
        """cut --partial emits GS V B."""
        result = runner.invoke(main, ["-t", str(out_file), "cut", "--partial", "--feed", "5"])
        assert result.exit_code == 0, result.output
        assert out_file.read_bytes() == b"\x1b@\x1dVB\x05"

    def test_no_target(self, runner):
        """Without --target or saved config the command fails."""
        result = runner.invoke(main, ["text", "x"])
        assert result.exit_code == 1
        assert "No target given" in result.output

    def test_saved_target_used(self, runner, out_file):
        """The saved config supplies the target."""
        save_config(str(out_file), "default")
        result = runner.invoke(main, ["text", "saved"])
        assert result.exit_code == 0, result.output
        assert out_file.read_bytes() == b"\x1b@saved\n"

    def test_unwritable_target(self, runner, tmp_path):
        """I/O failures are reported as connection errors."""
        target = str(tmp_path / "missing" / "out.bin")
        result = runner.invoke(main, ["-t", target, "--retry", "0", "text", "x"])
        assert result.exit_code == 1
        assert "Connection error" in result.output


class TestConfigCommands:
    """Test config show/set/clear."""

    def test_set_and_show(self, runner):
        """config set stores target and profile."""
        result = runner.invoke(main, ["config", "set", "tcp://10.0.0.5:9100", "--profile", "tm-t88v"])
        assert result.exit_code == 0, result.output
        saved = load_config()
        assert (saved.target, saved.profile) == ("tcp://10.0.0.5:9100", "TM-T88V")

        result = runner.invoke(main, ["config", "show"])
        assert "tcp://10.0.0.5:9100" in result.output
        assert "TM-T88V" in result.output

    def test_set_invalid_target(self, runner):
        """config set rejects unparseable targets."""
        result = runner.invoke(main, ["config", "set", "usb://nothex"])
        assert result.exit_code != 0
        assert load_config() is None

    def test_show_empty(self, runner):
        """config show without saved config."""
        result = runner.invoke(main, ["config", "show"])
        assert "No saved printer" in result.output

    def test_clear(self, runner):
        """config clear removes the saved config."""
        save_config("tcp://10.0.0.5")
        result = runner.invoke(main, ["config", "clear"])
        assert "cleared" in result.output
        assert load_config() is None
