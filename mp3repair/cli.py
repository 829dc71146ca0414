#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
mp3repair - reconcile a music library's directory tree with its ID3 tags.

Usage:
    mp3repair [command] [-flag[=value] ...]

Commands:
    about          Show version and build information
    check          Report empty folders, numbering gaps and tag conflicts
    export         Write the built-in defaults to defaults.yaml
    list           List artists, albums and tracks (the default command)
    postRepair     Delete the backups made by repair
    repair         Rewrite tags that disagree with the file layout
    resetDatabase  Make the media player rebuild its library database

Run "mp3repair <command> -help" for a command's flags.
"""

import sys
from typing import List, Optional

from .apppath import application_path
from .config import ConfigManager
from .errors import ConfigurationInvalid, Mp3RepairError
from .output import OutputBus, configure_logging, ERROR, INFO
from .commands.dispatcher import build_dispatcher, default_descriptors

LOG_DIRECTORY_NAME = "logs"


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run one command.

    Args:
        argv: full argument vector, program name first; sys.argv by default

    Returns:
        The process exit code: 0 on success, 1 on failure, 130 when interrupted
    """
    if argv is None:
        argv = sys.argv
    bus = OutputBus()
    handler = configure_logging(application_path() / LOG_DIRECTORY_NAME)
    bus.log(INFO, "execution starts", {"args": argv[1:]})
    try:
        try:
            config = ConfigManager()
            dispatcher = build_dispatcher(default_descriptors(), config)
            dispatcher.warn_about_unknown_configuration(config, bus)
        except ConfigurationInvalid as e:
            bus.write_error(f"The configuration file cannot be used: {e}")
            bus.log(ERROR, "invalid configuration", {"error": str(e)})
            return 1
        succeeded = dispatcher.dispatch(argv[1:], config, bus)
    except KeyboardInterrupt:
        bus.write_error("Operation cancelled.")
        return 130
    except Mp3RepairError as e:
        bus.write_error(str(e))
        bus.log(ERROR, "command failed", {"error": str(e)})
        return 1
    finally:
        bus.log(INFO, "execution ends", {})
        if handler is not None:
            handler.close()
            bus.logger.removeHandler(handler)
    return 0 if succeeded else 1


if __name__ == '__main__':
    sys.exit(main())
