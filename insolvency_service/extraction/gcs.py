from __future__ import annotations

from google.cloud import storage


def parse_gs_uri(uri: str) -> tuple[str, str]:
    """Split gs://bucket/object into (bucket, object)."""
    if not uri.startswith("gs://"):
        raise ValueError(f"Not a gs:// URI: {uri}")
    bucket, _, name = uri[len("gs://") :].partition("/")
    if not bucket or not name:
        raise ValueError(f"gs:// URI must name a bucket and an object: {uri}")
    return bucket, name


def download_bytes(client: storage.Client, bucket: str, name: str) -> bytes:
    b = client.bucket(bucket)
    blob = b.blob(name)
    return blob.download_as_bytes()
