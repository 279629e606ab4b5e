from types import SimpleNamespace

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError, ServiceRequestError

from blobdrive import storage_client
from blobdrive.storage_client import BlobStorageClient, ObjectRef, StorageError, map_azure_error


class _FakeBlobClient:
    def __init__(self, service, container, blob):
        self.service = service
        self.container = container
        self.blob = blob

    def download_blob(self):
        if (self.container, self.blob) not in self.service.data:
            raise ResourceNotFoundError("The specified blob does not exist.")
        return SimpleNamespace(readall=lambda: self.service.data[(self.container, self.blob)])

    def upload_blob(self, data, overwrite, content_settings):
        self.service.data[(self.container, self.blob)] = data
        self.service.last_upload = (overwrite, content_settings)
        return {"etag": '"0x1"', "last_modified": None}

    def delete_blob(self):
        self.service.data.pop((self.container, self.blob))


class _FakeService:
    def __init__(self):
        self.data = {("photos", "my/share/file1.jpg"): b"jpeg"}
        self.last_upload = None

    def list_containers(self):
        return [SimpleNamespace(name="photos"), SimpleNamespace(name="docs")]

    def get_container_client(self, name):
        blobs = [
            SimpleNamespace(
                name=key,
                size=len(data),
                etag='"0x1"',
                content_settings=SimpleNamespace(content_type="image/jpeg"),
                last_modified=None,
            )
            for (container, key), data in self.data.items()
            if container == name
        ]
        return SimpleNamespace(list_blobs=lambda: iter(blobs))

    def get_blob_client(self, container, blob):
        return _FakeBlobClient(self, container, blob)


@pytest.fixture
def fake_service(monkeypatch):
    service = _FakeService()
    monkeypatch.setattr(
        storage_client.BlobServiceClient,
        "from_connection_string",
        classmethod(lambda cls, conn: service),
    )
    return service


def test_from_env_requires_connection_string(monkeypatch):
    monkeypatch.delenv("AZURE_STORAGE_CONNECTION_STRING", raising=False)
    with pytest.raises(StorageError) as exc:
        BlobStorageClient.from_env()
    assert exc.value.status == 503


def test_list_and_objects(fake_service):
    client = BlobStorageClient("UseDevelopmentStorage=true")

    assert client.list_containers() == ["photos", "docs"]
    (entry,) = client.list_objects("photos")
    assert entry.key == "my/share/file1.jpg"
    assert entry.ref == ObjectRef(
        container="photos",
        key="my/share/file1.jpg",
        size=4,
        etag='"0x1"',
        content_type="image/jpeg",
    )


def test_upload_download_delete(fake_service):
    client = BlobStorageClient("UseDevelopmentStorage=true")

    ref = client.upload("photos", "my/share/new.txt", b"hello", "text/plain")
    assert ref.key == "my/share/new.txt" and ref.size == 5
    assert fake_service.last_upload[0] is True
    assert client.download(ref) == b"hello"

    client.delete(ref)
    with pytest.raises(StorageError) as exc:
        client.download(ref)
    assert exc.value.status == 404


def test_map_azure_error_statuses():
    assert map_azure_error(ResourceNotFoundError("gone"), "x").status == 404
    assert map_azure_error(ServiceRequestError("timeout"), "x").status == 504

    forbidden = HttpResponseError("denied")
    forbidden.status_code = 403
    assert map_azure_error(forbidden, "x").status == 403

    broken = HttpResponseError("boom")
    broken.status_code = 500
    assert map_azure_error(broken, "x").status == 502
