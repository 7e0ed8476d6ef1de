"""
Exit codes for mongoconf CLI commands.

Configuration errors get their own exit code so scripts can tell a bad
property value apart from a usage error or a crash.
"""

from typing import Optional

import typer


EXIT_CONFIG_ERROR = 2


class CliExit(typer.Exit):
    """
    typer.Exit that prints its message before leaving.

    Usage:
        raise CliExit.config_error("Missing required property 'database'.")
    """

    def __init__(self, code: int, message: Optional[str] = None):
        self.message = message
        super().__init__(code)
        if message:
            print(message)

    @classmethod
    def config_error(cls, message: Optional[str] = None) -> "CliExit":
        """Create a configuration error exit."""
        return cls(EXIT_CONFIG_ERROR, message)
