"""Tests for the stored secret envelope and lookup results."""

import pytest

from libs.platform.vault.envelope import (
    MISSING,
    FoundSecret,
    MissingSecret,
    SecretEnvelope,
)
from libs.platform.vault.exceptions import SecretContractViolationError


class TestSecretEnvelope:
    """Tests for SecretEnvelope payload conversion."""

    def test_to_payload_uses_value_field(self):
        assert SecretEnvelope("s3cret").to_payload() == {"value": "s3cret"}

    def test_to_payload_explicit_null(self):
        assert SecretEnvelope(None).to_payload() == {"value": None}

    def test_from_payload_value(self):
        envelope = SecretEnvelope.from_payload({"value": "s3cret"}, "kv/a/b")

        assert envelope == SecretEnvelope("s3cret")

    def test_from_payload_null(self):
        assert SecretEnvelope.from_payload({"value": None}, "kv/a/b") == SecretEnvelope(None)

    def test_from_payload_ignores_extra_fields(self):
        """Test other fields written alongside "value" are ignored."""
        envelope = SecretEnvelope.from_payload({"value": "v", "owner": "nifi"}, "kv/a/b")

        assert envelope.value == "v"

    def test_from_payload_non_string_value_stringified(self):
        assert SecretEnvelope.from_payload({"value": 42}, "kv/a/b") == SecretEnvelope("42")

    def test_from_payload_missing_value_field(self):
        """Test a payload without "value" is a contract violation."""
        with pytest.raises(SecretContractViolationError) as exc_info:
            SecretEnvelope.from_payload({"password": "hunter2"}, "kv/a/b")

        assert exc_info.value.missing_field == "value"
        assert exc_info.value.path == "kv/a/b"
        assert exc_info.value.operation == "read"
        assert "hunter2" not in str(exc_info.value)

    @pytest.mark.parametrize("data", [None, "value", ["value"]])
    def test_from_payload_not_a_mapping(self, data):
        with pytest.raises(SecretContractViolationError) as exc_info:
            SecretEnvelope.from_payload(data, "kv/a/b")

        assert exc_info.value.missing_field == "data"


class TestSecretLookup:
    """Tests for FoundSecret/MissingSecret."""

    def test_found_null_is_not_missing(self):
        assert FoundSecret(None) != MISSING
        assert not isinstance(FoundSecret(None), MissingSecret)

    def test_missing_instances_equal(self):
        assert MissingSecret() == MISSING

    def test_found_compares_by_value(self):
        assert FoundSecret("a") == FoundSecret("a")
        assert FoundSecret("a") != FoundSecret("b")

    def test_pattern_matching(self):
        """Test callers can branch on the lookup outcome with match."""

        def describe(result):
            match result:
                case MissingSecret():
                    return "missing"
                case FoundSecret(value=None):
                    return "null"
                case FoundSecret(value=value):
                    return value

        assert describe(MISSING) == "missing"
        assert describe(FoundSecret(None)) == "null"
        assert describe(FoundSecret("v")) == "v"
