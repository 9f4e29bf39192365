"""Tool availability checker for external dependencies."""

import logging
import shutil
from typing import Dict

from .errors import ToolNotFoundError

logger = logging.getLogger(__name__)


def check_tool_availability(file_command: str = "file", exiftool_command: str = "exiftool") -> Dict[str, bool]:
    """
    Check availability of the external tools the pipeline shells out to.

    Returns:
        Dictionary mapping tool names to availability status:
        - 'file': Content type sniffing for extension correction (required)
        - 'exiftool': Date embedding from sidecars (optional)
    """
    return {
        'file': shutil.which(file_command) is not None,
        'exiftool': shutil.which(exiftool_command) is not None,
    }


def check_required_tools(
    use_exiftool: bool = True,
    file_command: str = "file",
    exiftool_command: str = "exiftool",
) -> Dict[str, bool]:
    """
    Check that the tools the run needs are installed.

    ``file`` is always required; ``exiftool`` only when embedding is enabled.

    Returns:
        Tool availability as reported by check_tool_availability()

    Raises:
        ToolNotFoundError: If a required tool is not available
    """
    tools = check_tool_availability(file_command, exiftool_command)

    if tools['file']:
        logger.info(f"Tool available: {{'tool': 'file', 'command': {file_command!r}}}")
    else:
        logger.error(f"Tool not found: {{'tool': 'file', 'required': True}}")
        raise ToolNotFoundError(
            f"Tool '{file_command}' is required but not available.\n\n{_get_installation_instructions('file')}",
            tool='file',
        )

    if not use_exiftool:
        logger.info("Tool disabled: {'tool': 'exiftool', 'reason': 'config'}")
    elif tools['exiftool']:
        logger.info(f"Tool available: {{'tool': 'exiftool', 'command': {exiftool_command!r}}}")
    else:
        logger.error(f"Tool not found: {{'tool': 'exiftool', 'required': True}}")
        raise ToolNotFoundError(
            f"Tool '{exiftool_command}' is enabled in config but not available.\n\n"
            f"{_get_installation_instructions('exiftool')}",
            tool='exiftool',
        )

    return tools


def _get_installation_instructions(tool_name: str) -> str:
    """Get installation instructions for a missing tool."""
    instructions = {
        'file': (
            "The 'file' command detects real media types. Install it:\n"
            "  - macOS: included with the system\n"
            "  - Linux: sudo apt-get install file (Debian/Ubuntu)\n"
            "           sudo yum install file (RHEL/CentOS)\n"
            "  - Windows: use WSL or Git for Windows"
        ),
        'exiftool': (
            "ExifTool writes capture dates into copied media. Install it, "
            "or disable embedding with --skip-exiftool:\n"
            "  - Windows: Download from https://exiftool.org/\n"
            "  - macOS: brew install exiftool\n"
            "  - Linux: sudo apt-get install libimage-exiftool-perl"
        ),
    }

    return instructions.get(tool_name, f"Please install {tool_name}")
