"""
Test fixtures for the upload agent.
"""
from pathlib import Path
import pytest
from tenacity import wait_none

from upload_agent.coordinator import UploadCoordinator
from upload_agent.ledger import UploadLedger
from upload_agent.models import AgentConfig, RequestConfig
from upload_agent.uploader import HttpUploader

SERVER_URL = "http://uploads.test/upload"


@pytest.fixture
def tmp_upload_dir(tmp_path):
    """Create a temporary directory for test files."""
    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()
    return upload_dir


@pytest.fixture
def tmp_ledger_file(tmp_path):
    """Path of a ledger file that does not exist yet."""
    return tmp_path / "state" / "uploaded_files.log"


@pytest.fixture
def source_files(tmp_upload_dir):
    """Create a small directory tree to scan."""
    test_files = {
        "file1.txt": "Test content 1",
        "subdir/file2.txt": "Test content 2",
        "subdir/nested/file3.bin": "Test content 3",
    }

    for rel_path, content in test_files.items():
        file_path = tmp_upload_dir / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)

    return tmp_upload_dir


@pytest.fixture
def request_config():
    """Request configuration with no extra headers or fields."""
    return RequestConfig(server_url=SERVER_URL)


@pytest.fixture
def agent_config(tmp_upload_dir, tmp_ledger_file, request_config):
    """Agent configuration pointing at the temporary folders."""
    return AgentConfig(
        upload_dir=tmp_upload_dir,
        request=request_config,
        ledger_file=tmp_ledger_file,
        scan_interval=0,
        timeout=5.0
    )


@pytest.fixture
def ledger(tmp_ledger_file):
    """Create an exact-match ledger."""
    return UploadLedger(tmp_ledger_file)


@pytest.fixture
def uploader(ledger):
    """Create an uploader that never sleeps between attempts."""
    return HttpUploader(ledger, timeout=5.0, wait=wait_none())


@pytest.fixture
def coordinator(agent_config, ledger, uploader):
    """Create a coordinator wired to the test ledger and uploader."""
    return UploadCoordinator(agent_config, ledger=ledger, uploader=uploader)
