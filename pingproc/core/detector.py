"""
System and ping tool detection.
"""

import platform
import shutil
import socket
import sys
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class SystemInfo(BaseModel):
    """System information model."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    os_type: str  # 'Linux', 'Darwin', 'Windows'
    platform: str
    python_version: str
    hostname: str


class SystemDetector:
    """Detect system information and the ping command to run."""

    def detect_system(self) -> SystemInfo:
        """Detect current system information."""
        return SystemInfo(
            os_type=platform.system(),
            platform=platform.platform(),
            python_version=sys.version.split()[0],
            hostname=socket.gethostname(),
        )

    def default_ping_args(self, os_type: Optional[str] = None) -> List[str]:
        """
        Flags passed before the target when none are configured.

        Windows ping stops after four echoes on its own; the POSIX tools keep
        going until interrupted, so they get an explicit count.
        """
        os_type = os_type or platform.system()
        if os_type == "Windows":
            return []
        return ["-c", "4"]

    def ping_command(
        self,
        executable: str = "ping",
        args: Optional[List[str]] = None,
        os_type: Optional[str] = None,
    ) -> List[str]:
        """Command prefix for a single-target ping; the target is appended by the runner."""
        if args is None:
            args = self.default_ping_args(os_type)
        return [executable, *args]

    def is_tool_available(self, tool: str) -> bool:
        """Check if a tool is available in PATH."""
        return shutil.which(tool) is not None

    def get_installation_suggestion(self, tool: str = "ping", os_type: Optional[str] = None) -> str:
        """Get installation suggestion for a missing tool."""
        os_type = os_type or platform.system()
        suggestions = {
            "Linux": {
                "ping": "sudo apt-get install iputils-ping (or yum install iputils)",
            },
            "Darwin": {
                "ping": "Pre-installed",
            },
            "Windows": {
                "ping": "Pre-installed (check that %SystemRoot%\\System32 is on PATH)",
            },
        }

        if os_type in suggestions and tool in suggestions[os_type]:
            return suggestions[os_type][tool]

        return f"Please install {tool} manually"

    def get_tool_path(self, tool: str = "ping") -> Optional[str]:
        """Get the full path to a tool."""
        return shutil.which(tool)
