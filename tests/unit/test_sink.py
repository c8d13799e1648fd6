"""Unit tests for the Azure Blob Storage sink adapter."""

from __future__ import annotations

import pytest
from azure.core.exceptions import HttpResponseError, ServiceRequestError

from mongo2blob.pipeline.sink import CSV_CONTENT_TYPE, AzureBlobSink
from mongo2blob.types import SinkConnectError, SinkUploadError


class FakeContainerClient:
    def __init__(self, exists=True, exists_error=None, upload_error=None):
        self._exists = exists
        self.exists_error = exists_error
        self.upload_error = upload_error
        self.uploads = []

    def exists(self):
        if self.exists_error is not None:
            raise self.exists_error
        return self._exists

    def upload_blob(self, name, data, length, overwrite, content_settings):
        if self.upload_error is not None:
            raise self.upload_error
        self.uploads.append({
            "name": name,
            "data": data.read(),
            "length": length,
            "overwrite": overwrite,
            "content_type": content_settings.content_type,
        })


class FakeServiceClient:
    def __init__(self, container):
        self.container = container
        self.requested = []
        self.closed = 0

    def get_container_client(self, name):
        self.requested.append(name)
        return self.container

    def close(self):
        self.closed += 1


def _sink(sink_config, container):
    service = FakeServiceClient(container)
    connection_strings = []

    def factory(connection_string):
        connection_strings.append(connection_string)
        return service

    return AzureBlobSink(sink_config, service_factory=factory), service, connection_strings


def test_connect_targets_configured_container(sink_config) -> None:
    sink, service, connection_strings = _sink(sink_config, FakeContainerClient())

    sink.connect()

    assert connection_strings == [sink_config.connection_string]
    assert service.requested == ["exports"]


def test_malformed_connection_string_is_sink_connect_error(sink_config) -> None:
    def factory(connection_string):
        raise ValueError("Connection string missing required connection details.")

    with pytest.raises(SinkConnectError):
        AzureBlobSink(sink_config, service_factory=factory).connect()


@pytest.mark.parametrize("exists", [True, False])
def test_container_exists_reports_store_answer(sink_config, exists) -> None:
    sink, _, _ = _sink(sink_config, FakeContainerClient(exists=exists))
    sink.connect()

    assert sink.container_exists() is exists


def test_container_check_failure_is_sink_connect_error(sink_config) -> None:
    container = FakeContainerClient(exists_error=ServiceRequestError("DNS lookup failed"))
    sink, _, _ = _sink(sink_config, container)
    sink.connect()

    with pytest.raises(SinkConnectError):
        sink.container_exists()


def test_upload_streams_bytes_as_csv_blob(sink_config) -> None:
    container = FakeContainerClient()
    sink, _, _ = _sink(sink_config, container)
    sink.connect()

    sink.upload("data-export-2024-05-01T12:00:00.123Z.csv", b"a,b\n1,2\n")

    assert container.uploads == [{
        "name": "data-export-2024-05-01T12:00:00.123Z.csv",
        "data": b"a,b\n1,2\n",
        "length": 8,
        "overwrite": True,
        "content_type": CSV_CONTENT_TYPE,
    }]


def test_upload_failure_is_sink_upload_error(sink_config) -> None:
    container = FakeContainerClient(upload_error=HttpResponseError(message="AuthorizationFailure"))
    sink, _, _ = _sink(sink_config, container)
    sink.connect()

    with pytest.raises(SinkUploadError) as excinfo:
        sink.upload("data-export-x.csv", b"a\n1\n")

    assert excinfo.value.blob_name == "data-export-x.csv"


def test_use_before_connect_is_rejected(sink_config) -> None:
    sink, _, _ = _sink(sink_config, FakeContainerClient())

    with pytest.raises(SinkConnectError):
        sink.container_exists()


def test_close_is_idempotent(sink_config) -> None:
    sink, service, _ = _sink(sink_config, FakeContainerClient())
    sink.connect()

    sink.close()
    sink.close()

    assert service.closed == 1
