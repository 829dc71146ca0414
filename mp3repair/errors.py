"""
Error types raised by the library, tag codec and commands.

Per-item errors (TagUnreadable, TagUnwritable, NoEditRequired) are caught
by the loop that iterates the items; the others end the current command.
"""


class Mp3RepairError(Exception):
    """Base class for all mp3repair errors"""


class UserInputInvalid(Mp3RepairError):
    """A flag value is unparseable or out of range"""


class ConfigurationInvalid(Mp3RepairError):
    """A default in the configuration file has the wrong type"""

    def __init__(self, section: str, key: str, reason: str):
        self.section = section
        self.key = key
        self.reason = reason
        if key:
            message = f'invalid content in configuration file: section "{section}", key "{key}": {reason}'
        elif section:
            message = f'invalid content in configuration file: section "{section}": {reason}'
        else:
            message = f"invalid content in configuration file: {reason}"
        super().__init__(message)


class FilesystemUnavailable(Mp3RepairError):
    """A required directory cannot be read"""


class TagUnreadable(Mp3RepairError):
    """The ID3V2 tag of a file is missing or cannot be parsed"""


class TagUnwritable(Mp3RepairError):
    """The ID3V2 tag of a file could not be written"""


class NoEditRequired(Mp3RepairError):
    """The requested tag values are already present in the file"""


class NotReady(Mp3RepairError):
    """Reconciliation was requested before the track's tags were read"""


class ServiceManagementFailure(Mp3RepairError):
    """The media indexing service could not be queried or stopped"""
