#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
resetDatabase command - makes the media player rebuild its library index.

Runs only when the dirty marker says track files have been edited. Stops
the media sharing service, deletes the media player's database files, and
clears the dirty marker when every file is gone.
"""

import argparse
import os
import time
from pathlib import Path
from typing import List, Optional

from ..config import ConfigManager, IntBounds
from ..errors import ServiceManagementFailure
from ..library.search import validate_extension
from ..output import OutputBus, quote, ERROR, INFO
from ..state import DirtyMarker
from .base import BaseCommand, Flag
from .services import ServiceGateway, SystemServiceGateway, STOPPED

TIMEOUT_BOUNDS = IntBounds(minimum=1, default=10, maximum=60)


class ResetDatabaseCommand(BaseCommand):
    """Stops the indexing service and deletes its database files"""

    FLAGS = [
        Flag("service", str, "WMPNetworkSVC", "name of the media player sharing service"),
        Flag("timeout", int, TIMEOUT_BOUNDS.default, "timeout in seconds for stopping the media player service",
             bounds=TIMEOUT_BOUNDS),
        Flag("metadata", str, "%USERPROFILE%/AppData/Local/Microsoft/Media Player",
             "directory where the media player service metadata files are stored"),
        Flag("extension", str, ".wmdb", "extension for metadata files"),
    ]

    poll_interval = 0.1

    def __init__(
        self,
        config: ConfigManager,
        bus: OutputBus,
        marker: Optional[DirtyMarker] = None,
        gateway: Optional[ServiceGateway] = None
    ):
        super().__init__(config, bus)
        self.marker = marker or DirtyMarker()
        self.gateway = gateway or SystemServiceGateway()

    @property
    def name(self) -> str:
        return "resetDatabase"

    def execute(self, options: argparse.Namespace) -> bool:
        validate_extension(options.extension, "-extension")
        if not self.marker.is_dirty():
            self.bus.write_console(f"Running {quote(self.name)} is not necessary, as no track files have been edited")
            return True
        self.log_start(options)
        self.stop_service(options)
        if not self.delete_metadata(options):
            return False
        self.marker.clear_dirty(self.bus)
        return True

    # ==================== Service ====================

    def stop_service(self, options: argparse.Namespace) -> bool:
        """
        Stop the service, waiting up to the timeout.

        Failures are reported, not raised. Returns True if the service is
        known to be stopped.
        """
        service = options.service
        try:
            state = self.gateway.query(service)
        except ServiceManagementFailure as e:
            self.bus.write_error(f"The service {quote(service)} cannot be opened: {e}")
            self.log_service_issue(service, "open service", str(e))
            self.list_services()
            return False
        if state == STOPPED:
            self.bus.log(INFO, "service status", {"service": service, "status": "stopped"})
            return True
        try:
            state = self.gateway.stop(service)
        except ServiceManagementFailure as e:
            self.bus.write_error(f"The service {quote(service)} cannot be stopped: {e}")
            self.log_service_issue(service, "stop service", str(e))
            return False
        return self.wait_for_stop(service, state, options.timeout)

    def wait_for_stop(self, service: str, state: str, timeout: int) -> bool:
        deadline = time.monotonic() + timeout
        while state != STOPPED:
            if time.monotonic() >= deadline:
                self.bus.write_error(
                    f"The service {quote(service)} could not be stopped within the {timeout} second timeout"
                )
                self.log_service_issue(service, "stop service", "timed out", {"timeout in seconds": timeout})
                return False
            time.sleep(self.poll_interval)
            try:
                state = self.gateway.query(service)
            except ServiceManagementFailure as e:
                self.bus.write_error(f"The status for the service {quote(service)} cannot be obtained: {e}")
                self.log_service_issue(service, "query service status", str(e))
                return False
        self.bus.log(INFO, "service status", {"service": service, "status": "stopped"})
        return True

    def list_services(self) -> None:
        try:
            services = self.gateway.list_services()
        except ServiceManagementFailure as e:
            self.bus.write_error(f"The list of available services cannot be obtained: {e}")
            self.bus.log(ERROR, "service manager issue", {"operation": "list services", "error": str(e)})
            return
        self.bus.write_console("The following services are available:")
        if not services:
            self.bus.write_console("  - none -")
            return
        for state in sorted(services):
            self.bus.write_console(f"  State {quote(state)}:")
            for name in services[state]:
                self.bus.write_console(f"    {quote(name)}")

    def log_service_issue(self, service: str, operation: str, error: str, extra: Optional[dict] = None) -> None:
        fields = {"service": service, "operation": operation, "error": error}
        fields.update(extra or {})
        self.bus.log(ERROR, "service issue", fields)

    # ==================== Metadata files ====================

    def metadata_files(self, directory: Path, extension: str) -> Optional[List[Path]]:
        try:
            with os.scandir(directory) as it:
                names = sorted(entry.name for entry in it if entry.is_file() and entry.name.endswith(extension))
        except OSError as e:
            self.bus.write_error(f"The directory {quote(str(directory))} cannot be read: {e}")
            self.bus.log(ERROR, "cannot read directory", {"directory": str(directory), "error": str(e)})
            return None
        return [directory / name for name in names]

    def delete_metadata(self, options: argparse.Namespace) -> bool:
        """Delete the database files; True if all of them are gone"""
        directory = Path(options.metadata)
        paths = self.metadata_files(directory, options.extension)
        if paths is None:
            return False
        if not paths:
            self.bus.write_console(f"No metadata files were found in {quote(str(directory))}")
            self.bus.log(INFO, "no files found", {"directory": str(directory), "extension": options.extension})
            return True
        deleted = 0
        for path in paths:
            try:
                path.unlink()
            except OSError as e:
                self.bus.write_error(f"The file {quote(str(path))} cannot be deleted: {e}")
                self.bus.log(ERROR, "cannot delete file", {"fileName": str(path), "error": str(e)})
                continue
            deleted += 1
        self.bus.write_console(f"{deleted} out of {len(paths)} metadata files have been deleted from {quote(str(directory))}")
        return deleted == len(paths)
