"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Frozen models give us the immutability the pipeline relies on (a record
  read from the registry is never patched afterwards).
- Field descriptions document the shape of the host tool's data in one place.

Note:
- These models describe *what* a guest or an export is, not *how* the host
  tool is invoked.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.errors import ConfigurationConflictError, UnsupportedFormatError


class GuestState(str, Enum):
    """Running state as reported by `wsl -l -v`.

    Parsing is literal: only the exact tokens `Running` and `Stopped` are
    recognised, anything else (`Installing`, `Converting`, lowercase) is
    `UNKNOWN`.
    """

    RUNNING = "Running"
    STOPPED = "Stopped"
    UNKNOWN = "Unknown"

    @classmethod
    def from_token(cls, token: str) -> "GuestState":
        if token == cls.RUNNING.value:
            return cls.RUNNING
        if token == cls.STOPPED.value:
            return cls.STOPPED
        return cls.UNKNOWN


class GuestRecord(BaseModel):
    """One line of the guest registry."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Distribution name as listed by the host tool.",
    )
    state: GuestState = Field(
        default=GuestState.UNKNOWN,
        description="Running state at the time of the listing.",
    )
    version: str = Field(
        default="",
        description="WSL version column (typically '1' or '2').",
    )

    def matches(self, target: str) -> bool:
        """Names compare case-insensitively, like the host tool does."""

        return self.name.casefold() == target.casefold()


class RegistryParseError(BaseModel):
    """A listing line that could not be split into name/state/version."""

    model_config = ConfigDict(frozen=True)

    line_number: int = Field(..., ge=1)
    line: str
    reason: str


class GuestListing(BaseModel):
    """Result of one registry read."""

    model_config = ConfigDict(frozen=True)

    records: list[GuestRecord] = Field(
        default_factory=list,
        description="Well-formed records in listing order.",
    )
    parse_errors: list[RegistryParseError] = Field(
        default_factory=list,
        description="Malformed lines, captured instead of failing the read.",
    )

    def find(self, target: str) -> GuestRecord | None:
        for record in self.records:
            if record.matches(target):
                return record
        return None


class ContainerFormat(str, Enum):
    """Archive shape produced by `wsl --export`."""

    TAR = "tar"
    VHDX = "vhdx"

    @classmethod
    def from_value(cls, value: str) -> "ContainerFormat":
        normalized = value.strip().lower()
        if normalized == "zip":
            raise UnsupportedFormatError(
                "to output in zip format use the --zip flag; --format selects the export "
                "file format (vhdx or tar)"
            )
        for member in cls:
            if member.value == normalized:
                return member
        raise UnsupportedFormatError(
            f"output format {value!r} not supported, supported formats are "
            '"vhdx" (default) and "tar"'
        )

    @property
    def extension(self) -> str:
        return self.value

    @property
    def is_virtual_disk(self) -> bool:
        return self is ContainerFormat.VHDX


class ExportRequest(BaseModel):
    """Inputs of a single export.

    Only built by the pipeline after the target guest was seen `Stopped`.
    """

    model_config = ConfigDict(frozen=True)

    guest_name: str = Field(..., min_length=1)
    container_format: ContainerFormat = Field(default=ContainerFormat.VHDX)
    output_path: Path


class CompressionKind(str, Enum):
    NONE = "none"
    ZIP = "zip"
    NATIVE = "native"


class CompressionChoice(BaseModel):
    """Post-processing applied to the exported file; exactly one per run."""

    model_config = ConfigDict(frozen=True)

    kind: CompressionKind = Field(default=CompressionKind.NONE)
    delete_original: bool = Field(
        default=False,
        description="Only meaningful for ZIP: remove the export once archived.",
    )

    @classmethod
    def from_flags(
        cls,
        *,
        zip_archive: bool,
        native: bool,
        keep_original: bool = False,
    ) -> "CompressionChoice":
        """Build the choice from CLI flags, rejecting zip + native together."""

        if zip_archive and native:
            raise ConfigurationConflictError(
                "choose --zip for ZIP or --compact for NTFS compression, but not both"
            )
        if zip_archive:
            return cls(kind=CompressionKind.ZIP, delete_original=not keep_original)
        if native:
            return cls(kind=CompressionKind.NATIVE)
        return cls()
