"""Domain models - run summary and command outcome.

These are plain values handed over by the backup engine; no I/O here.
"""

from datetime import timedelta
from enum import Enum, IntEnum

from pydantic import AliasChoices, BaseModel, Field


COMMAND_BACKUP = "backup"

# restic exits with 3 when a snapshot was created but some files could not be read
RESTIC_EXIT_INCOMPLETE_SNAPSHOT = 3


class Status(IntEnum):
    """Command outcome, exported as an ordinal."""

    FAILED = 0
    WARNING = 1
    SUCCESS = 2

    @classmethod
    def parse(cls, value: "str | int | Status") -> "Status":
        """Parse a status name (case-insensitive) or its ordinal."""
        if isinstance(value, Status):
            return value
        if isinstance(value, int):
            return cls(value)
        raw = value.strip()
        if raw.isdigit():
            return cls(int(raw))
        try:
            return cls[raw.upper()]
        except KeyError:
            raise ValueError(f"unknown status: {value!r}") from None

    @classmethod
    def from_exit_code(cls, code: int) -> "Status":
        """Map a restic exit code onto a status."""
        if code == 0:
            return cls.SUCCESS
        if code == RESTIC_EXIT_INCOMPLETE_SNAPSHOT:
            return cls.WARNING
        return cls.FAILED


class ExportFormat(str, Enum):
    """Encoding used when pushing to the gateway."""

    TEXT = "text"
    PROTOBUF = "protobuf"


def _field(*aliases: str):
    return Field(default=0, validation_alias=AliasChoices(*aliases))


class Summary(BaseModel):
    """Summary of a command run.

    Accepts field names, the CamelCase keys used by resticprofile, and the
    keys of restic's own ``--json`` backup summary.
    """

    files_new: int = _field("files_new", "FilesNew")
    files_changed: int = _field("files_changed", "FilesChanged")
    files_unmodified: int = _field("files_unmodified", "FilesUnmodified")
    dirs_new: int = _field("dirs_new", "DirsNew")
    dirs_changed: int = _field("dirs_changed", "DirsChanged")
    dirs_unmodified: int = _field("dirs_unmodified", "DirsUnmodified")
    files_total: int = _field("files_total", "FilesTotal", "total_files_processed")
    bytes_added: int = _field("bytes_added", "BytesAdded", "data_added")
    bytes_added_packed: int = _field("bytes_added_packed", "BytesAddedPacked", "data_added_packed")
    bytes_total: int = _field("bytes_total", "BytesTotal", "total_bytes_processed")
    duration: timedelta = Field(
        default=timedelta(0),
        validation_alias=AliasChoices("duration", "Duration", "total_duration"),
    )

    @property
    def duration_seconds(self) -> float:
        return self.duration.total_seconds()
