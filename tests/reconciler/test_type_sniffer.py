"""Tests for content type detection."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gtakeout_reconcile.reconciler.errors import ToolNotFoundError, UnknownFileTypeError
from gtakeout_reconcile.reconciler.type_sniffer import FileCommandSniffer, extension_for_description


class TestExtensionForDescription:
    """Tests for the description -> extension table."""

    @pytest.mark.parametrize("description, extension", [
        ("PNG image data, 640 x 480, 8-bit/color RGBA", "png"),
        ("JPEG image data, JFIF standard 1.01", "jpg"),
        ("GIF image data, version 89a", "gif"),
        ("ISO Media, HEIF Image HEVC Main or Main Still Picture Profile", "heic"),
        ("Audio file with ID3 version 2.4.0, contains: MPEG ADTS, layer III, MP3 audio", "mp3"),
        ("ISO Media, Apple QuickTime movie, Apple QuickTime (.MOV/QT)", "mov"),
        ("ISO Media, MP4 v2 [ISO 14496-14]", "mp4"),
        ("ISO Media, MP4 Base Media v1 [ISO 14496-12:2003]", "mp4"),
        ("ISO Media, MPEG-4 (.MP4) for SonyPSP", "mp4"),
        ("ISO Media, MPEG v4 system, 3GPP", "mp4"),
        ("TIFF image data, little-endian", "tiff"),
        ("PC bitmap, Windows 3.x format", "bmp"),
        ("ISO Media, Apple iTunes Video (.M4V) Video", "m4v"),
        ("RIFF (little-endian) data, Web/P image", "webp"),
        ("Microsoft ASF", "asf"),
        ("MPEG sequence, v2, program multiplex", "mpeg"),
        ("RIFF (little-endian) data, AVI, 640 x 480", "avi"),
        ("Canon CR2 raw image data, version 2.0", "cr2"),
    ])
    def test_known_types(self, description, extension):
        """Test canonical extensions for known descriptions."""
        assert extension_for_description(description, "bin") == extension

    @pytest.mark.parametrize("description", ["data", "ASCII text", "Canon CIFF raw image data, version 1.2"])
    def test_keeps_original(self, description):
        """Test descriptions under which the original extension is kept."""
        assert extension_for_description(description, "CRW") == "CRW"

    def test_unknown(self):
        """Test that anything else raises."""
        with pytest.raises(UnknownFileTypeError):
            extension_for_description("PDF document, version 1.4", "jpg")

    def test_data_must_be_exact(self):
        """Test that 'data' only matches the whole description."""
        with pytest.raises(UnknownFileTypeError):
            extension_for_description("Zip archive data", "jpg")


class TestFileCommandSniffer:
    """Tests for FileCommandSniffer."""

    def test_runs_file_brief(self):
        """Test the command line and output handling."""
        with patch('gtakeout_reconcile.reconciler.type_sniffer.subprocess.run') as mock_run:
            mock_run.return_value = MagicMock(stdout="PNG image data, 10 x 10\n")

            result = FileCommandSniffer().describe(Path("/a/b: c.jpg"))

        assert result == "PNG image data, 10 x 10"
        args = mock_run.call_args[0][0]
        assert args == ["file", "--brief", str(Path("/a/b: c.jpg"))]
        assert mock_run.call_args.kwargs['check'] is True

    def test_missing_command(self):
        """Test that a missing binary raises ToolNotFoundError."""
        with patch('gtakeout_reconcile.reconciler.type_sniffer.subprocess.run', side_effect=FileNotFoundError()):
            with pytest.raises(ToolNotFoundError):
                FileCommandSniffer().describe(Path("/a/b.jpg"))

    def test_command_failure_propagates(self):
        """Test that a failing command is re-raised."""
        error = subprocess.CalledProcessError(1, ["file"], stderr="boom")
        with patch('gtakeout_reconcile.reconciler.type_sniffer.subprocess.run', side_effect=error):
            with pytest.raises(subprocess.CalledProcessError):
                FileCommandSniffer().describe(Path("/a/b.jpg"))
