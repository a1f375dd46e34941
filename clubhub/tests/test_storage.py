import io
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from botocore.exceptions import ClientError

from clubhub.errors import UploadError
from clubhub.storage import LocalDiskStorage, ObjectStorage, timestamped_name


class BrokenStream:
    """Yields one chunk, then fails like a dropped connection."""

    def __init__(self, chunk):
        self.chunk = chunk

    def read(self, size=-1):
        if self.chunk is None:
            raise OSError("connection reset")
        chunk, self.chunk = self.chunk, None
        return chunk


class TimestampedNameTests(unittest.TestCase):
    def test_keeps_extension(self):
        self.assertTrue(timestamped_name("Photo.JPG").endswith(".jpg"))
        self.assertNotIn(".", timestamped_name("no_extension"))

    def test_names_are_unique(self):
        self.assertNotEqual(timestamped_name("a.png"), timestamped_name("a.png"))


class LocalDiskStorageTests(unittest.TestCase):
    def setUp(self):
        self.upload_dir = os.path.join(tempfile.mkdtemp(), "uploads")
        self.storage = LocalDiskStorage(upload_dir=self.upload_dir)

    def tearDown(self):
        shutil.rmtree(os.path.dirname(self.upload_dir), ignore_errors=True)

    def test_creates_directory(self):
        self.assertTrue(os.path.isdir(self.upload_dir))

    def test_save_returns_served_url(self):
        url = self.storage.save(io.BytesIO(b"hello"), "note.txt", "text/plain")
        self.assertTrue(url.startswith("/uploads/"))
        self.assertTrue(url.endswith(".txt"))
        name = url[len("/uploads/"):]
        with open(os.path.join(self.upload_dir, name), "rb") as f:
            self.assertEqual(f.read(), b"hello")

    def test_write_failure_raises_upload_error(self):
        shutil.rmtree(self.upload_dir)
        with self.assertRaises(UploadError):
            self.storage.save(io.BytesIO(b"hello"), "note.txt")

    def test_partial_write_is_removed(self):
        with self.assertRaises(UploadError):
            self.storage.save(BrokenStream(b"first-chunk"), "clip.mp4")
        self.assertEqual(os.listdir(self.upload_dir), [])


class ObjectStorageTests(unittest.TestCase):
    @patch("clubhub.storage.boto3.client")
    def test_save_uploads_and_returns_public_url(self, mock_client_factory):
        client = mock_client_factory.return_value
        storage = ObjectStorage(
            bucket="club-media",
            region="auto",
            endpoint="https://s3.example.test",
            access_key_id="key",
            secret_access_key="secret",
            public_base_url="https://cdn.example.test/",
        )
        stream = io.BytesIO(b"jpeg-bytes")

        url = storage.save(stream, "flight.jpg", "image/jpeg")

        client.upload_fileobj.assert_called_once()
        args, kwargs = client.upload_fileobj.call_args
        self.assertIs(args[0], stream)
        self.assertEqual(args[1], "club-media")
        key = args[2]
        self.assertTrue(key.startswith("uploads/"))
        self.assertTrue(key.endswith(".jpg"))
        self.assertEqual(kwargs["ExtraArgs"], {"ContentType": "image/jpeg"})
        self.assertEqual(url, f"https://cdn.example.test/{key}")

    @patch("clubhub.storage.boto3.client")
    def test_url_without_public_base(self, mock_client_factory):
        storage = ObjectStorage(bucket="club-media", endpoint="https://s3.example.test")
        self.assertEqual(
            storage.url_for("uploads/1.jpg"),
            "https://club-media.s3.example.test/uploads/1.jpg",
        )
        storage = ObjectStorage(bucket="club-media", region="eu-west-1")
        self.assertEqual(
            storage.url_for("uploads/1.jpg"),
            "https://club-media.s3.eu-west-1.amazonaws.com/uploads/1.jpg",
        )

    @patch("clubhub.storage.boto3.client")
    def test_transfer_failure_raises_upload_error(self, mock_client_factory):
        client = mock_client_factory.return_value
        client.upload_fileobj.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )
        storage = ObjectStorage(bucket="club-media")
        with self.assertRaises(UploadError):
            storage.save(io.BytesIO(b"x"), "x.png", "image/png")


if __name__ == "__main__":
    unittest.main()
