import pytest
from pydantic import ValidationError

from core.domain.errors import ConfigurationConflictError, UnsupportedFormatError
from core.domain.models import (
    CompressionChoice,
    CompressionKind,
    ContainerFormat,
    GuestListing,
    GuestRecord,
    GuestState,
)


def test_container_format_from_value() -> None:
    assert ContainerFormat.from_value("tar") is ContainerFormat.TAR
    assert ContainerFormat.from_value(" VHDX ") is ContainerFormat.VHDX
    assert ContainerFormat.VHDX.is_virtual_disk
    assert not ContainerFormat.TAR.is_virtual_disk


def test_zip_format_points_to_zip_flag() -> None:
    with pytest.raises(UnsupportedFormatError, match="--zip"):
        ContainerFormat.from_value("zip")


def test_unknown_format_lists_supported_ones() -> None:
    with pytest.raises(UnsupportedFormatError, match="vhdx"):
        ContainerFormat.from_value("qcow2")


def test_compression_choice_rejects_zip_and_native() -> None:
    with pytest.raises(ConfigurationConflictError):
        CompressionChoice.from_flags(zip_archive=True, native=True)


def test_compression_choice_from_flags() -> None:
    assert CompressionChoice.from_flags(zip_archive=False, native=False).kind is CompressionKind.NONE

    zipped = CompressionChoice.from_flags(zip_archive=True, native=False)
    assert zipped.kind is CompressionKind.ZIP
    assert zipped.delete_original

    kept = CompressionChoice.from_flags(zip_archive=True, native=False, keep_original=True)
    assert not kept.delete_original

    native = CompressionChoice.from_flags(zip_archive=False, native=True, keep_original=True)
    assert native.kind is CompressionKind.NATIVE
    assert not native.delete_original


def test_state_tokens_are_literal() -> None:
    assert GuestState.from_token("Stopped") is GuestState.STOPPED
    assert GuestState.from_token("Running") is GuestState.RUNNING
    assert GuestState.from_token("running") is GuestState.UNKNOWN
    assert GuestState.from_token("Installing") is GuestState.UNKNOWN


def test_guest_record_is_frozen_and_matches_case_insensitively() -> None:
    record = GuestRecord(name="Ubuntu-22.04", state=GuestState.STOPPED, version="2")
    assert record.matches("ubuntu-22.04")
    assert not record.matches("ubuntu")
    with pytest.raises(ValidationError):
        record.state = GuestState.RUNNING  # type: ignore[misc]


def test_listing_find_returns_first_match() -> None:
    first = GuestRecord(name="Debian", state=GuestState.RUNNING, version="2")
    second = GuestRecord(name="debian", state=GuestState.STOPPED, version="1")
    assert GuestListing(records=[first, second]).find("DEBIAN") is first
    assert GuestListing(records=[first]).find("Alpine") is None
