from pathlib import Path

import pytest
import responses

DATA = Path(__file__).parent / "data"


@pytest.fixture
def sample_xml() -> bytes:
    return (DATA / "sansay_dump.xml").read_bytes()


@pytest.fixture
def mock_responses():
    """Enable responses mock for HTTP requests."""
    with responses.RequestsMock() as rsps:
        yield rsps
