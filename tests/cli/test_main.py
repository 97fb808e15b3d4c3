"""Tests for the Beacon Inspector command-line interface."""

import json

import pytest
import yaml
from typer.testing import CliRunner

from beacon_inspector import __version__
from beacon_inspector.cli.main import app


ADOBE_LINK_URL = "https://x/b/ss/mysite/?pe=lnk_o&pev2=Example%20Link&c1=foo&v1=bar&AQB=1"

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove configuration environment variables."""
    for name in ("PROVIDERS", "FORMAT", "LOG_LEVEL"):
        monkeypatch.delenv(f"BEACON_INSPECTOR_{name}", raising=False)


class TestDecodeCommand:
    """Test the decode command."""

    def test_decode_json(self):
        """Test JSON output for an Adobe Analytics beacon."""
        result = runner.invoke(app, ["decode", ADOBE_LINK_URL])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["provider"] == {"name": "Adobe Analytics", "key": "ADOBEANALYTICS", "type": "analytics"}
        assert [item["key"] for item in data["data"]] == ["pe", "pev2", "c1", "v1", "rsid"]
        assert data["data"][2] == {
            "key": "c1",
            "field": "prop1",
            "value": "foo",
            "group": "Custom Traffic Variables (props)"
        }

    def test_decode_post_data_yaml(self):
        """Test POST data and YAML output."""
        result = runner.invoke(app, [
            "decode",
            "https://example.tt.omtrdc.net/m2/example/mbox/json?mbox=home",
            "--post-data", "mboxCount=2",
            "--format", "yaml",
        ])

        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["provider"]["key"] == "ADOBETARGET"
        assert [item["key"] for item in data["data"]] == ["mbox", "mboxCount", "clientCode", "mboxType"]

    def test_decode_text(self):
        """Test grouped text output."""
        result = runner.invoke(app, ["decode", ADOBE_LINK_URL, "-f", "text"])

        assert result.exit_code == 0
        assert "Adobe Analytics [ADOBEANALYTICS] (analytics)" in result.stdout
        assert "Custom Conversion Variables (eVars)" in result.stdout
        assert "Example Link" in result.stdout

    def test_decode_unknown_url(self):
        """Test an unrecognised URL decodes to an unknown provider."""
        result = runner.invoke(app, ["decode", "https://www.example.com/pixel?a=1"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["provider"]["type"] == "unknown"
        assert data["data"] == []

    def test_decode_invalid_url(self):
        """Test an unparseable URL exits with code 2."""
        result = runner.invoke(app, ["decode", "/b/ss/mysite/?pe=lnk_o"])

        assert result.exit_code == 2
        assert "Cannot parse beacon URL" in result.output

    def test_decode_missing_config(self, tmp_path):
        """Test a missing config file exits with code 2."""
        result = runner.invoke(app, ["decode", ADOBE_LINK_URL, "--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 2
        assert "Configuration error" in result.output

    def test_decode_format_from_config(self, tmp_path):
        """Test the output format can come from a config file."""
        path = tmp_path / "config.yaml"
        path.write_text("output_format: text\n")

        result = runner.invoke(app, ["decode", ADOBE_LINK_URL, "--config", str(path)])

        assert result.exit_code == 0
        assert "Report Suites" in result.stdout
        assert not result.stdout.lstrip().startswith("{")


class TestScanCommand:
    """Test the scan command."""

    def test_scan_file(self, temp_url_file):
        """Test every beacon in a file is decoded and other URLs skipped."""
        result = runner.invoke(app, ["scan", str(temp_url_file)])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [beacon["provider"]["key"] for beacon in data] == [
            "ADOBEANALYTICS",
            "GOOGLETAGMANAGER",
            "GA4",
        ]

    def test_scan_provider_filter(self, temp_url_file):
        """Test --provider restricts decoding to selected providers."""
        result = runner.invoke(app, ["scan", str(temp_url_file), "--provider", "GA4"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [beacon["provider"]["key"] for beacon in data] == ["GA4"]

    def test_scan_providers_from_environment(self, temp_url_file):
        """Test enabled providers can come from the environment."""
        result = runner.invoke(
            app,
            ["scan", str(temp_url_file)],
            env={"BEACON_INSPECTOR_PROVIDERS": "GOOGLETAGMANAGER"}
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [beacon["provider"]["key"] for beacon in data] == ["GOOGLETAGMANAGER"]

    def test_scan_stdin_with_post_data(self):
        """Test reading URLs and POST bodies from stdin."""
        lines = "\n".join([
            "https://metrics.example.com/b/ss/suite/1/s1?AQB=1 pageName=Home&AQE=1",
            "https://www.example.com/",
        ])

        result = runner.invoke(app, ["scan", "-"], input=lines)

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data) == 1
        assert [item["key"] for item in data[0]["data"]] == ["pageName", "rsid"]

    def test_scan_no_beacons(self, tmp_path):
        """Test exit code 1 when nothing matches."""
        path = tmp_path / "requests.txt"
        path.write_text("https://www.example.com/\nhttps://www.example.com/app.js\n")

        result = runner.invoke(app, ["scan", str(path)])

        assert result.exit_code == 1
        assert "No beacons found" in result.output

    def test_scan_missing_file(self, tmp_path):
        """Test a missing input file exits with code 2."""
        result = runner.invoke(app, ["scan", str(tmp_path / "missing.txt")])

        assert result.exit_code == 2


class TestInfoCommands:
    """Test match, providers and version commands."""

    def test_match(self):
        """Test the provider for a matching URL is shown."""
        result = runner.invoke(app, ["match", "https://www.googletagmanager.com/gtm.js?id=GTM-ABC1234"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "GOOGLETAGMANAGER\tGoogle Tag Manager\tTag Manager"

    def test_match_none(self):
        """Test exit code 1 when no provider matches."""
        result = runner.invoke(app, ["match", "https://www.example.com/"])

        assert result.exit_code == 1
        assert "No provider matches" in result.output

    def test_providers(self):
        """Test listing providers in dispatch order."""
        result = runner.invoke(app, ["providers"])

        assert result.exit_code == 0
        lines = result.stdout.strip().splitlines()
        assert [line.split()[0] for line in lines] == [
            "ADOBEANALYTICS",
            "ADOBETARGET",
            "GA4",
            "GOOGLETAGMANAGER",
        ]
        assert "UX Testing" in lines[1]

    def test_version(self):
        """Test version output."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout
