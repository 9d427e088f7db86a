# CCJK Config Output Module
# Rich console output for the command line interface

from ccjk_config.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
