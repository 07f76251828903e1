"""Unit tests for FileUploader.

Tests file upload operations, batch uploads, cancellation, and progress reporting.
"""

import pytest
from unittest.mock import Mock, MagicMock
from pathlib import Path

from ftp_deploy.ftp.uploader import FileUploader, UploadProgress, UploadResult
from ftp_deploy.ftp.connection import FTPConnectionConfig, FTPConnectionManager
from ftp_deploy.ftp.exceptions import FTPNotConnectedError, FTPUploadError
from ftp_deploy.local.scanner import LocalFile


class TestUploadProgress:
    """Tests for UploadProgress dataclass."""

    def test_percent_calculation(self):
        """Test percentage calculation."""
        progress = UploadProgress(
            remote_path="/site/index.html",
            file_name="index.html",
            bytes_sent=50,
            bytes_total=100
        )
        assert progress.percent == 50.0

    def test_percent_zero_total(self):
        """Test percentage with zero total."""
        progress = UploadProgress(
            remote_path="/site/empty.txt",
            file_name="empty.txt",
            bytes_sent=0,
            bytes_total=0
        )
        assert progress.percent == 0.0

    def test_percent_capped(self):
        """ASCII transfers may send more bytes than the file holds (CRLF)."""
        progress = UploadProgress(
            remote_path="/site/a.txt",
            file_name="a.txt",
            bytes_sent=120,
            bytes_total=100
        )
        assert progress.percent == 100.0


class TestFileUploader:
    """Tests for FileUploader class."""

    @pytest.fixture
    def mock_connection(self):
        """Create mock FTP connection."""
        connection = Mock(spec=FTPConnectionManager)
        connection.is_connected = True
        connection.config = FTPConnectionConfig(host="ftp.example.com")
        connection.ftp = MagicMock()

        # Make storbinary/storlines call the callback like the real FTP
        def fake_storbinary(cmd, fp, blocksize=8192, callback=None):
            while True:
                data = fp.read(blocksize)
                if not data:
                    break
                if callback:
                    callback(data)

        def fake_storlines(cmd, fp, callback=None):
            for line in fp:
                if callback:
                    callback(line)

        connection.ftp.storbinary.side_effect = fake_storbinary
        connection.ftp.storlines.side_effect = fake_storlines
        return connection

    def _local_file(self, path: Path) -> LocalFile:
        return LocalFile.from_path(path, path.parent)

    def test_init(self, mock_connection):
        """Test uploader initialization."""
        uploader = FileUploader(mock_connection)
        assert uploader.is_cancelled is False
        assert uploader.use_binary is True

    def test_cancel(self, mock_connection):
        """Test cancellation flag."""
        uploader = FileUploader(mock_connection)

        uploader.cancel()
        assert uploader.is_cancelled is True

        uploader.reset_cancel()
        assert uploader.is_cancelled is False

    def test_upload_file_not_connected(self, sample_file):
        """Test upload fails when not connected."""
        connection = Mock(spec=FTPConnectionManager)
        connection.is_connected = False

        uploader = FileUploader(connection)

        with pytest.raises(FTPNotConnectedError):
            uploader.upload_file(sample_file, "/site/page.html")

    def test_upload_file_binary(self, mock_connection, sample_file):
        """Binary uploads use STOR via storbinary."""
        uploader = FileUploader(mock_connection)

        result = uploader.upload_file(sample_file, "/site/page.html")

        assert result.success is True
        assert result.remote_path == "/site/page.html"
        assert result.bytes_transferred == sample_file.stat().st_size
        args, kwargs = mock_connection.ftp.storbinary.call_args
        assert args[0] == "STOR /site/page.html"
        assert kwargs["blocksize"] == FileUploader.BLOCK_SIZE
        mock_connection.ftp.storlines.assert_not_called()

    def test_upload_file_ascii(self, mock_connection, sample_file):
        """ASCII uploads use storlines."""
        mock_connection.config = FTPConnectionConfig(host="h", use_binary=False)
        uploader = FileUploader(mock_connection)

        result = uploader.upload_file(sample_file, "/site/page.html")

        assert result.success is True
        args, _ = mock_connection.ftp.storlines.call_args
        assert args[0] == "STOR /site/page.html"
        mock_connection.ftp.storbinary.assert_not_called()

    def test_upload_file_with_progress(self, mock_connection, sample_file):
        """Test upload with progress callback."""
        uploader = FileUploader(mock_connection)
        progress_updates = []

        uploader.upload_file(sample_file, "/site/page.html", on_progress=progress_updates.append)

        assert progress_updates
        assert progress_updates[-1].percent == 100.0
        assert progress_updates[-1].file_name == "page.html"

    def test_upload_file_ftp_error(self, mock_connection, sample_file):
        """Test upload wraps FTP errors."""
        mock_connection.ftp.storbinary.side_effect = Exception("553 Could not create file")

        uploader = FileUploader(mock_connection)

        with pytest.raises(FTPUploadError) as exc_info:
            uploader.upload_file(sample_file, "/site/page.html")

        assert exc_info.value.remote_path == "/site/page.html"
        assert "553" in str(exc_info.value)

    def test_upload_batch_success(self, mock_connection, tmp_path):
        """Test batch upload of several files."""
        files = []
        for name in ("a.html", "b.css", "c.js"):
            path = tmp_path / name
            path.write_text(name)
            files.append((self._local_file(path), f"/site/{name}"))

        uploader = FileUploader(mock_connection)
        results = uploader.upload_batch(files)

        assert len(results) == 3
        assert all(r.success for r in results)
        assert mock_connection.ftp.storbinary.call_count == 3

    def test_upload_batch_with_callback(self, mock_connection, tmp_path):
        """Test batch upload with completion callback."""
        path = tmp_path / "a.html"
        path.write_text("a")
        completed = []

        uploader = FileUploader(mock_connection)
        uploader.upload_batch(
            [(self._local_file(path), "/site/a.html")],
            on_file_complete=completed.append
        )

        assert len(completed) == 1
        assert completed[0].remote_path == "/site/a.html"

    def test_upload_batch_stops_on_first_error(self, mock_connection, tmp_path):
        """By default the first failure propagates."""
        files = []
        for name in ("a.html", "b.html"):
            path = tmp_path / name
            path.write_text(name)
            files.append((self._local_file(path), f"/site/{name}"))

        mock_connection.ftp.storbinary.side_effect = Exception("Connection lost")
        uploader = FileUploader(mock_connection)

        with pytest.raises(FTPUploadError) as exc_info:
            uploader.upload_batch(files)

        assert exc_info.value.source_path == "a.html"
        assert mock_connection.ftp.storbinary.call_count == 1

    def test_upload_batch_continue_on_error(self, mock_connection, tmp_path):
        """With stop_on_error=False failures are recorded and the batch continues."""
        files = []
        for name in ("a.html", "b.html"):
            path = tmp_path / name
            path.write_text(name)
            files.append((self._local_file(path), f"/site/{name}"))

        call_count = [0]

        def flaky_storbinary(*args, **kwargs):
            call_count[0] += 1
            if call_count[0] == 1:
                raise Exception("First upload failed")

        mock_connection.ftp.storbinary.side_effect = flaky_storbinary
        uploader = FileUploader(mock_connection)

        results = uploader.upload_batch(files, stop_on_error=False)

        assert len(results) == 2
        assert results[0].success is False
        assert "First upload failed" in results[0].error_message
        assert results[1].success is True

    def test_upload_batch_cancelled_midway(self, mock_connection, tmp_path):
        """Test batch can be cancelled midway."""
        files = []
        for name in ("a.html", "b.html", "c.html"):
            path = tmp_path / name
            path.write_text(name)
            files.append((self._local_file(path), f"/site/{name}"))

        uploader = FileUploader(mock_connection)

        def cancel_after_first(result: UploadResult):
            uploader.cancel()

        results = uploader.upload_batch(files, on_file_complete=cancel_after_first)

        assert len(results) == 3
        assert results[0].success is True
        assert all(not r.success for r in results[1:])
        assert all(r.error_message == "Upload cancelled" for r in results[1:])
        assert all(r.cancelled for r in results[1:])
        assert results[0].cancelled is False

    def test_upload_batch_cancelled_before_start(self, mock_connection, tmp_path):
        """A cancel requested before the batch skips every file."""
        path = tmp_path / "a.html"
        path.write_text("a")

        uploader = FileUploader(mock_connection)
        uploader.cancel()

        results = uploader.upload_batch([(self._local_file(path), "/site/a.html")])

        assert [r.cancelled for r in results] == [True]
        mock_connection.ftp.storbinary.assert_not_called()
        assert uploader.is_cancelled is True
