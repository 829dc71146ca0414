#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Access to the host service manager.

The system gateway drives the Windows service control tool (sc.exe) as a
subprocess. Tests substitute their own ServiceGateway.
"""

import re
import subprocess
from abc import ABC, abstractmethod
from typing import Dict, List

from ..errors import ServiceManagementFailure

RUNNING = "RUNNING"
STOPPED = "STOPPED"
STOP_PENDING = "STOP_PENDING"

_STATE_PATTERN = re.compile(r'STATE\s*:\s*\d+\s+(\w+)')
_NAME_PATTERN = re.compile(r'SERVICE_NAME:\s*(\S.*)$')


class ServiceGateway(ABC):
    """Queries and stops services by name"""

    @abstractmethod
    def query(self, service: str) -> str:
        """
        Current state of a service, e.g. RUNNING or STOPPED.

        Raises:
            ServiceManagementFailure: the service cannot be opened or queried
        """
        pass

    @abstractmethod
    def stop(self, service: str) -> str:
        """
        Ask a service to stop; returns the state reported right after.

        Raises:
            ServiceManagementFailure: the request was refused
        """
        pass

    @abstractmethod
    def list_services(self) -> Dict[str, List[str]]:
        """
        Known services grouped by state.

        Raises:
            ServiceManagementFailure: the list cannot be obtained
        """
        pass


class SystemServiceGateway(ServiceGateway):
    """ServiceGateway backed by sc.exe"""

    def __init__(self, executable: str = "sc", timeout: int = 30):
        self.executable = executable
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        cmd = [self.executable, *args]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise ServiceManagementFailure(f"{' '.join(cmd)} timed out") from e
        except OSError as e:
            raise ServiceManagementFailure(
                f"The service manager cannot be accessed. Try running the program again as an administrator. Error: {e}"
            ) from e
        if result.returncode != 0:
            message = (result.stdout or result.stderr or "unknown error").strip()
            raise ServiceManagementFailure(message)
        return result.stdout

    @staticmethod
    def _state(output: str) -> str:
        match = _STATE_PATTERN.search(output)
        if not match:
            raise ServiceManagementFailure(f"unrecognized service status: {output.strip()!r}")
        return match.group(1)

    def query(self, service: str) -> str:
        return self._state(self._run("query", service))

    def stop(self, service: str) -> str:
        return self._state(self._run("stop", service))

    def list_services(self) -> Dict[str, List[str]]:
        output = self._run("query", "type=", "service", "state=", "all")
        services: Dict[str, List[str]] = {}
        name = None
        for line in output.splitlines():
            line = line.strip()
            name_match = _NAME_PATTERN.match(line)
            if name_match:
                name = name_match.group(1).strip()
                continue
            state_match = _STATE_PATTERN.search(line)
            if state_match and name:
                services.setdefault(state_match.group(1), []).append(name)
                name = None
        for names in services.values():
            names.sort()
        return services
