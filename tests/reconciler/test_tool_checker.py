"""Tests for tool availability checker."""

from unittest.mock import patch

import pytest

from gtakeout_reconcile.reconciler.errors import ToolNotFoundError
from gtakeout_reconcile.reconciler.tool_checker import check_required_tools, check_tool_availability

WHICH = 'gtakeout_reconcile.reconciler.tool_checker.shutil.which'


def which_only(*available):
    return lambda name: f"/usr/bin/{name}" if name in available else None


class TestCheckToolAvailability:
    """Tests for check_tool_availability function."""

    def test_reports_both_tools(self):
        """Test that file and exiftool are both checked."""
        with patch(WHICH, side_effect=which_only("file")):
            result = check_tool_availability()

        assert result == {'file': True, 'exiftool': False}

    def test_custom_commands(self):
        """Test that configured command names are looked up."""
        with patch(WHICH, side_effect=which_only("gfile", "exiftool-12")):
            result = check_tool_availability("gfile", "exiftool-12")

        assert result == {'file': True, 'exiftool': True}


class TestCheckRequiredTools:
    """Tests for check_required_tools function."""

    def test_all_available(self):
        """Test that nothing is raised when tools are installed."""
        with patch(WHICH, side_effect=which_only("file", "exiftool")):
            assert check_required_tools(use_exiftool=True) == {'file': True, 'exiftool': True}

    def test_file_always_required(self):
        """Test that a missing file command is fatal."""
        with patch(WHICH, side_effect=which_only("exiftool")):
            with pytest.raises(ToolNotFoundError) as exc_info:
                check_required_tools(use_exiftool=False)

        assert "file" in str(exc_info.value)

    def test_exiftool_required_when_enabled(self):
        """Test that a missing exiftool is fatal when embedding is on."""
        with patch(WHICH, side_effect=which_only("file")):
            with pytest.raises(ToolNotFoundError) as exc_info:
                check_required_tools(use_exiftool=True)

        assert "--skip-exiftool" in str(exc_info.value)

    def test_exiftool_optional_when_disabled(self):
        """Test that exiftool may be missing when embedding is off."""
        with patch(WHICH, side_effect=which_only("file")):
            check_required_tools(use_exiftool=False)
