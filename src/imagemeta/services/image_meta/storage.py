"""Cloud Storage gateway for the image metadata pipeline."""

import logging
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from google.cloud import storage
from google.cloud.exceptions import Forbidden, NotFound

from imagemeta.services.image_meta.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageGateway:
    """Scoped access to objects in Google Cloud Storage.

    One gateway is created per invocation and closed when it ends. Use it as
    a context manager so the underlying client is always released:

        with StorageGateway(project_id) as gateway:
            with gateway.open_reader("bucket", "photo.png") as reader:
                data = reader.read()
    """

    def __init__(self, project_id: str | None = None):
        """Initialize GCS client.

        Args:
            project_id: GCP project ID. If None, uses default credentials.

        Raises:
            StorageError: If the client cannot be created
        """
        try:
            self.client = storage.Client(project=project_id)
        except Exception as e:
            logger.error("Failed to create storage client", extra={"error": str(e)})
            raise StorageError(f"Failed to create client: {e}") from e

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "StorageGateway":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def open_reader(self, bucket_name: str, object_name: str) -> Iterator[BinaryIO]:
        """Open a fresh read stream for an object.

        Each call opens a new stream starting at byte 0; streams are never
        rewound. The stream is closed when the context exits.

        Args:
            bucket_name: Name of the GCS bucket
            object_name: Path to the object in the bucket

        Yields:
            Binary stream of the object content

        Raises:
            StorageError: If the object is missing, forbidden, or cannot be opened
        """
        try:
            blob = self.client.bucket(bucket_name).blob(object_name)
            # Fetch metadata first so a missing object fails here, not on read
            blob.reload()
            reader = blob.open("rb")
        except NotFound as e:
            logger.error(
                "File not found in GCS",
                extra={"bucket": bucket_name, "object_name": object_name},
            )
            raise StorageError(f"File not found: gs://{bucket_name}/{object_name}") from e
        except Forbidden as e:
            logger.error(
                "Access forbidden to GCS file",
                extra={"bucket": bucket_name, "object_name": object_name},
            )
            raise StorageError(f"Access denied: gs://{bucket_name}/{object_name}") from e
        except Exception as e:
            logger.error(
                "Failed to open GCS file for reading",
                extra={
                    "bucket": bucket_name,
                    "object_name": object_name,
                    "error": str(e),
                },
            )
            raise StorageError(f"Failed to open file: {e}") from e

        try:
            yield reader
        finally:
            reader.close()

    @contextmanager
    def open_writer(
        self,
        bucket_name: str,
        object_name: str,
        content_type: str = "application/octet-stream",
    ) -> Iterator[BinaryIO]:
        """Open a write stream that creates or overwrites an object.

        The upload is finalized when the stream is closed on context exit,
        including when the body of the `with` block raises.

        Args:
            bucket_name: Name of the GCS bucket
            object_name: Path to store the object in the bucket
            content_type: MIME type recorded on the object

        Yields:
            Binary write stream

        Raises:
            StorageError: If the stream cannot be opened
        """
        try:
            blob = self.client.bucket(bucket_name).blob(object_name)
            writer = blob.open("wb", content_type=content_type)
        except Exception as e:
            logger.error(
                "Failed to open GCS file for writing",
                extra={
                    "bucket": bucket_name,
                    "object_name": object_name,
                    "error": str(e),
                },
            )
            raise StorageError(f"Failed to open file for writing: {e}") from e

        try:
            yield writer
        finally:
            writer.close()

    def read_object(self, bucket_name: str, object_name: str, max_bytes: int = 0) -> bytes:
        """Read an object's full content through a fresh reader.

        Args:
            bucket_name: Name of the GCS bucket
            object_name: Path to the object in the bucket
            max_bytes: Reject objects larger than this; 0 disables the cap

        Raises:
            StorageError: If opening or reading fails, or the cap is exceeded
        """
        with self.open_reader(bucket_name, object_name) as reader:
            try:
                content = reader.read(max_bytes + 1) if max_bytes else reader.read()
            except Exception as e:
                logger.error(
                    "Failed to read GCS file",
                    extra={
                        "bucket": bucket_name,
                        "object_name": object_name,
                        "error": str(e),
                    },
                )
                raise StorageError(f"Failed to read file: {e}") from e

        if max_bytes and len(content) > max_bytes:
            raise StorageError(
                f"File exceeds {max_bytes} bytes: gs://{bucket_name}/{object_name}"
            )

        logger.info(
            "File read from GCS",
            extra={
                "bucket": bucket_name,
                "object_name": object_name,
                "size_bytes": len(content),
            },
        )
        return content

    def write_object(
        self,
        bucket_name: str,
        object_name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Write bytes to an object, overwriting any previous content.

        Returns:
            GCS URI of the written object (gs://bucket/object)

        Raises:
            StorageError: If opening, writing, or finalizing fails
        """
        try:
            with self.open_writer(bucket_name, object_name, content_type) as writer:
                writer.write(data)
        except StorageError:
            raise
        except Exception as e:
            logger.error(
                "Failed to write GCS file",
                extra={
                    "bucket": bucket_name,
                    "object_name": object_name,
                    "error": str(e),
                },
            )
            raise StorageError(f"Failed to write file: {e}") from e

        gcs_uri = f"gs://{bucket_name}/{object_name}"
        logger.info(
            "File written to GCS",
            extra={"gcs_uri": gcs_uri, "size_bytes": len(data)},
        )
        return gcs_uri
