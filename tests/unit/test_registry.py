"""
Unit tests for the certificate registry.

Uses mock ports (fake byte sources / extractors) to test load-state
transitions in isolation from the filesystem.

Test categories:
  - Unloaded state: every lookup fails
  - Successful load: truthy result, lookups served
  - Failed load: registry cleared and unloaded, even after a prior success
  - Short-circuit: a failing port stops the load before later stages
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from certdb.adapters.container import PlainContainerExtractor
from certdb.domain.models import CIA_CERT_NAMES, Certificate
from certdb.loader import build_database
from certdb.railway import ErrorCode, Result, ResultAssertions
from certdb.registry import CertificateRegistry
from tests.conftest import raw_database

# ─────────────────────── Mock Port Factories ───────────────────────


def _make_source(*results: Result[bytes]) -> MagicMock:
    """Create a mock ByteSource returning the given Results in order."""
    mock = MagicMock()
    mock.read.side_effect = list(results)
    return mock


def _make_registry(
    *results: Result[bytes], required: tuple[str, ...] = CIA_CERT_NAMES
) -> CertificateRegistry:
    return CertificateRegistry(
        source=_make_source(*results),
        extractor=PlainContainerExtractor(),
        required_names=required,
    )


# ─────────────────────── Unloaded ───────────────────────


class TestUnloadedRegistry:
    def test_starts_unloaded_and_empty(self) -> None:
        registry = _make_registry()
        assert registry.is_loaded() is False
        assert len(registry) == 0
        assert registry.names() == []
        assert "CA00000003" not in registry

    def test_get_fails_when_unloaded(self) -> None:
        """
        GIVEN a registry that was never loaded
        WHEN a certificate is requested
        THEN the lookup fails with NOT_FOUND_OR_UNLOADED.
        """
        result = _make_registry().get("CA00000003")
        ResultAssertions.assert_failure(result, ErrorCode.NOT_FOUND_OR_UNLOADED)
        ResultAssertions.assert_failure_message_contains(
            result, "no certificate database is loaded"
        )


# ─────────────────────── Success track ───────────────────────


class TestSuccessfulLoad:
    def test_load_is_truthy_and_counts_certificates(self, cia_database: bytes) -> None:
        registry = _make_registry(Result.success(cia_database))
        result = registry.load("certs.db")
        assert result
        ResultAssertions.assert_success_value(result, 3)
        assert registry.is_loaded() is True
        assert len(registry) == 3

    def test_get_returns_certificate(
        self, cia_database: bytes, cia_certificates: list[Certificate]
    ) -> None:
        registry = _make_registry(Result.success(cia_database))
        registry.load("certs.db")
        for cert in cia_certificates:
            ResultAssertions.assert_success_value(registry.get(cert.name), cert)
            assert cert.name in registry

    def test_names_sorted(self, cia_database: bytes) -> None:
        registry = _make_registry(Result.success(cia_database))
        registry.load("certs.db")
        assert registry.names() == sorted(CIA_CERT_NAMES)

    def test_get_absent_name(self, cia_database: bytes) -> None:
        registry = _make_registry(Result.success(cia_database))
        registry.load("certs.db")
        result = registry.get("CA00000004")
        ResultAssertions.assert_failure(result, ErrorCode.NOT_FOUND_OR_UNLOADED)
        ResultAssertions.assert_failure_message_contains(result, "does not exist")

    def test_source_receives_path(self, cia_database: bytes) -> None:
        source = _make_source(Result.success(cia_database))
        registry = CertificateRegistry(source, PlainContainerExtractor())
        registry.load("/data/certs.db")
        source.read.assert_called_once_with("/data/certs.db")

    def test_loading_twice_gives_same_contents(self, cia_database: bytes) -> None:
        """
        GIVEN the same valid database loaded twice
        WHEN the registry contents are compared after each load
        THEN key sets and certificates are identical.
        """
        registry = _make_registry(Result.success(cia_database), Result.success(cia_database))
        registry.load("certs.db")
        first = {name: registry.get(name).value() for name in registry.names()}
        registry.load("certs.db")
        second = {name: registry.get(name).value() for name in registry.names()}
        assert first == second

    def test_empty_database_without_requirements(self) -> None:
        """
        GIVEN a size=0 database and an empty required list
        WHEN loaded
        THEN the registry is loaded and empty.
        """
        registry = _make_registry(Result.success(raw_database(b"")), required=())
        ResultAssertions.assert_success_value(registry.load("certs.db"), 0)
        assert registry.is_loaded() is True
        assert registry.names() == []

    def test_load_bytes(self, cia_database: bytes) -> None:
        registry = _make_registry()
        ResultAssertions.assert_success_value(registry.load_bytes(cia_database), 3)
        assert registry.is_loaded()


# ─────────────────────── Failure track ───────────────────────


class TestFailedLoad:
    def test_missing_required_certificate(self, cia_certificates: list[Certificate]) -> None:
        """
        GIVEN a database missing one required certificate
        WHEN loaded
        THEN load fails with MISSING_REQUIRED_CERTIFICATE, the registry stays
        unloaded, and lookups of any name fail.
        """
        registry = _make_registry(Result.success(build_database(cia_certificates[:2])))
        result = registry.load("certs.db")

        assert not result
        ResultAssertions.assert_failure(result, ErrorCode.MISSING_REQUIRED_CERTIFICATE)
        assert registry.is_loaded() is False
        for name in CIA_CERT_NAMES:
            ResultAssertions.assert_failure(registry.get(name), ErrorCode.NOT_FOUND_OR_UNLOADED)

    def test_failed_reload_clears_previous_contents(
        self, cia_database: bytes, cia_certificates: list[Certificate]
    ) -> None:
        """
        GIVEN a registry that loaded successfully
        WHEN a second load fails
        THEN the earlier certificates are gone and the registry is unloaded.
        """
        registry = _make_registry(
            Result.success(cia_database),
            Result.success(b"CERS" + cia_database[4:]),
        )
        assert registry.load("certs.db")
        result = registry.load("certs.db")

        ResultAssertions.assert_failure(result, ErrorCode.BAD_MAGIC)
        assert registry.is_loaded() is False
        assert len(registry) == 0
        assert cia_certificates[0].name not in registry

    @pytest.mark.parametrize(
        ("raw", "code"),
        [
            (b"", ErrorCode.MALFORMED_CONTAINER),
            (b"CERT", ErrorCode.MALFORMED_CONTAINER),
            (raw_database(b"", size=1), ErrorCode.CORRUPT_DECLARED_SIZE),
            (raw_database(b"\x01\x02\x03\x04"), ErrorCode.MALFORMED_RECORD),
        ],
    )
    def test_failure_kinds_are_preserved(self, raw: bytes, code: ErrorCode) -> None:
        registry = _make_registry(Result.success(raw), required=())
        ResultAssertions.assert_failure(registry.load("certs.db"), code)
        assert registry.is_loaded() is False

    def test_source_failure_short_circuits(self) -> None:
        """
        GIVEN a byte source that fails
        WHEN loading
        THEN the extractor is never called and the source failure is returned.
        """
        source = _make_source(Result.failure(ErrorCode.SOURCE_READ_FAILURE, "no such file"))
        extractor = MagicMock()
        registry = CertificateRegistry(source, extractor)

        result = registry.load("missing.db")
        ResultAssertions.assert_failure(result, ErrorCode.SOURCE_READ_FAILURE)
        extractor.extract.assert_not_called()

    def test_extractor_failure_is_returned(self, cia_database: bytes) -> None:
        extractor = MagicMock()
        extractor.extract.return_value = Result.failure(
            ErrorCode.MALFORMED_CONTAINER, "not a valid container"
        )
        registry = CertificateRegistry(_make_source(Result.success(cia_database)), extractor)
        ResultAssertions.assert_failure(registry.load("certs.db"), ErrorCode.MALFORMED_CONTAINER)
        extractor.extract.assert_called_once_with(cia_database)

    def test_raising_port_becomes_unexpected_error(self) -> None:
        source = MagicMock()
        source.read.side_effect = RuntimeError("boom")
        registry = CertificateRegistry(source, PlainContainerExtractor())
        ResultAssertions.assert_failure(registry.load("certs.db"), ErrorCode.UNEXPECTED_ERROR)
        assert registry.is_loaded() is False
