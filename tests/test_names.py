"""Tests for the signature-authorized display-name update flow."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import address_of, sign
from rentfree.errors import AuthError, ValidationError
from rentfree.registry.repository import DisplayNameRecord
from rentfree.services.names import NameUpdateService, signature_bytes


@pytest.fixture()
def service(registry) -> NameUpdateService:
    return NameUpdateService(registry, clock_ms=lambda: 1_234)


class TestUpdateDisplayName:
    def test_valid_request_is_stored(self, service, registry, signing_key, name_message):
        wallet = address_of(signing_key)
        record = service.update_display_name(wallet, "alice", name_message, sign(signing_key, name_message))
        assert record == DisplayNameRecord(wallet=wallet, name="alice", updated_at=1_234)
        assert registry.lookup(wallet) == "alice"

    @pytest.mark.parametrize("missing", ["wallet", "name", "message", "signature"])
    def test_missing_fields(self, service, signing_key, name_message, missing):
        fields = {
            "wallet": address_of(signing_key),
            "name": "alice",
            "message": name_message,
            "signature": sign(signing_key, name_message),
        }
        fields[missing] = None
        with pytest.raises(ValidationError, match="Missing fields"):
            service.update_display_name(fields["wallet"], fields["name"], fields["message"], fields["signature"])

    def test_bad_prefix_checked_before_name_length(self, service, signing_key):
        message = "HELLO:" + "x"
        with pytest.raises(ValidationError, match="prefix"):
            service.update_display_name(address_of(signing_key), "n" * 30, message, sign(signing_key, message))

    @pytest.mark.parametrize("length", [1, 24])
    def test_name_length_edges_accepted(self, service, signing_key, name_message, length):
        record = service.update_display_name(
            address_of(signing_key), "n" * length, name_message, sign(signing_key, name_message)
        )
        assert len(record.name) == length

    def test_name_too_long_rejected_before_signature(self, signing_key, name_message):
        registry = MagicMock()
        service = NameUpdateService(registry)
        with pytest.raises(ValidationError, match="length"):
            service.update_display_name(address_of(signing_key), "n" * 25, name_message, [0] * 64)
        registry.upsert.assert_not_called()

    def test_bad_signature_never_writes(self, signing_key, name_message):
        registry = MagicMock()
        service = NameUpdateService(registry)
        signature = sign(signing_key, name_message)
        signature[0] ^= 0x01
        with pytest.raises(AuthError) as info:
            service.update_display_name(address_of(signing_key), "alice", name_message, signature)
        assert str(info.value) == "Signature verification failed"
        registry.upsert.assert_not_called()

    def test_signature_with_out_of_range_bytes_is_validation_error(self, service, signing_key, name_message):
        with pytest.raises(ValidationError, match="signature"):
            service.update_display_name(address_of(signing_key), "alice", name_message, [256] * 64)

    def test_non_string_name_is_validation_error(self, service, signing_key, name_message):
        with pytest.raises(ValidationError):
            service.update_display_name(address_of(signing_key), 42, name_message, sign(signing_key, name_message))

    def test_last_write_wins_across_updates(self, registry, signing_key, name_message):
        ticks = iter([10, 20])
        service = NameUpdateService(registry, clock_ms=lambda: next(ticks))
        wallet = address_of(signing_key)
        signature = sign(signing_key, name_message)
        service.update_display_name(wallet, "first", name_message, signature)
        service.update_display_name(wallet, "second", name_message, signature)
        assert registry.get(wallet) == DisplayNameRecord(wallet, "second", 20)


def test_signature_bytes_conversion():
    assert signature_bytes([1, 2, 255]) == b"\x01\x02\xff"
    assert signature_bytes(b"\x00") == b"\x00"
    with pytest.raises(ValidationError):
        signature_bytes("deadbeef")
    with pytest.raises(ValidationError):
        signature_bytes([True, 2])
    with pytest.raises(ValidationError):
        signature_bytes({"0": 1})
