"""Tests for main.py CLI functionality."""

from unittest.mock import patch

import pytest

from image_variants.main import main


class TestMainCLI:
    """Tests for the main CLI functionality."""

    def test_main_with_no_args_shows_help(self):
        """Test that running main without arguments shows help."""
        with patch("sys.argv", ["image-variants"]):
            with patch("argparse.ArgumentParser.print_help") as mock_help:
                with patch("sys.exit") as mock_exit:
                    main()
                    mock_help.assert_called_once()
                    mock_exit.assert_called_once_with(1)

    def test_main_version_command(self):
        """Test version command output."""
        with patch("sys.argv", ["image-variants", "version"]):
            with patch("builtins.print") as mock_print:
                with patch("sys.exit") as mock_exit:
                    main()
                    mock_print.assert_any_call("Image Variants CLI")
                    mock_print.assert_any_call("Version 0.1.0")
                    mock_print.assert_any_call(
                        "Variants: default, sd_320x180, hd_1280x720, fhd_1920x1080"
                    )
                    mock_exit.assert_called_once_with(0)

    def test_main_process_command_basic(self):
        """Test process command with basic arguments."""
        test_args = ["image-variants", "process", "--bucket", "my-bucket"]

        with patch("sys.argv", test_args):
            with patch("image_variants.main.run_from_args", return_value=0) as mock_run:
                with patch("sys.exit") as mock_exit:
                    main()

                    args = mock_run.call_args[0][0]
                    assert args.bucket == "my-bucket"
                    assert args.prefix == ""
                    assert args.public is True
                    assert args.include_derived is False
                    mock_exit.assert_called_once_with(0)

    def test_main_process_command_with_options(self):
        """Test process command with every option set."""
        test_args = [
            "image-variants",
            "process",
            "--bucket",
            "my-bucket",
            "--prefix",
            "icuvids/2/thumbnails",
            "--private",
            "--region",
            "eu-west-1",
            "--endpoint-url",
            "http://localhost:9000",
            "--include-derived",
            "--max-attempts",
            "5",
            "--retry-delay",
            "0.5",
            "--summary-json",
            "out.json",
            "--debug",
        ]

        with patch("sys.argv", test_args):
            with patch("image_variants.main.run_from_args", return_value=0) as mock_run:
                with patch("sys.exit"):
                    main()

                    args = mock_run.call_args[0][0]
                    assert args.prefix == "icuvids/2/thumbnails"
                    assert args.public is False
                    assert args.region == "eu-west-1"
                    assert args.endpoint_url == "http://localhost:9000"
                    assert args.include_derived is True
                    assert args.max_attempts == 5
                    assert args.retry_delay == 0.5
                    assert args.summary_json == "out.json"
                    assert args.debug is True

    def test_main_process_propagates_exit_code(self):
        """Test the process command exits with run_from_args' code."""
        with patch("sys.argv", ["image-variants", "process", "--bucket", "b"]):
            with patch("image_variants.main.run_from_args", return_value=1):
                with patch("sys.exit") as mock_exit:
                    main()
                    mock_exit.assert_called_once_with(1)

    def test_main_process_requires_bucket(self, capsys):
        """Test the bucket option is mandatory."""
        with patch("sys.argv", ["image-variants", "process"]):
            with pytest.raises(SystemExit) as excinfo:
                main()
        assert excinfo.value.code == 2
        assert "--bucket" in capsys.readouterr().err
