"""
Mockup Approval Proxy - Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any application import so the
       `settings` singleton never sees a developer's real credentials.

Fixture Hierarchy:
    Session-scoped:
    └── rsa_private_key_pem: freshly generated RSA key (PEM, PKCS#8)

    Function-scoped:
    ├── credentials: complete DocuSignCredentials using that key
    ├── sample_pdf_bytes / sample_pdf_base64: tiny PDF document
    ├── json_store: JsonFileSendLogStore in tmp_path
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import base64
import os
import tempfile

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before mockup_proxy.config is imported anywhere
os.environ["DATABASE_URL"] = ""
os.environ["DOCUSIGN_LOG_FILE"] = os.path.join(
    tempfile.mkdtemp(prefix="mockup_proxy_test_"), "docusign-logs.json"
)
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DOCUSIGN_ACCOUNT_ID"] = "acct-test"
os.environ["DOCUSIGN_INTEGRATION_KEY"] = "ik-test"
os.environ["DOCUSIGN_USER_ID"] = "user-test"
os.environ["DOCUSIGN_PRIVATE_KEY"] = "not-a-real-key"
os.environ["DOCUSIGN_CC_EMAIL"] = ""
os.environ["BRIGHTPEARL_ACCOUNT_ID"] = ""
os.environ["BRIGHTPEARL_API_TOKEN"] = ""
os.environ["SFTP_HOST"] = ""
os.environ["SFTP_USERNAME"] = ""


TEST_BASE_PATH = "https://demo.docusign.test/restapi"
TEST_OAUTH_HOST = "account-d.docusign.test"


# ══════════════════════════════════════════════════════════════════════════
# Session-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def rsa_private_key_pem() -> str:
    """A 2048-bit RSA key; generated once since keygen is slow."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def rsa_public_key_pem(rsa_private_key_pem) -> str:
    key = serialization.load_pem_private_key(rsa_private_key_pem.encode("ascii"), password=None)
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def credentials(rsa_private_key_pem):
    from mockup_proxy.services.credentials import DocuSignCredentials

    return DocuSignCredentials(
        integration_key="ik-test",
        user_id="user-test",
        private_key=rsa_private_key_pem,
        account_id="acct-test",
        base_path=TEST_BASE_PATH,
        oauth_host=TEST_OAUTH_HOST,
    )


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Not a renderable PDF; only the header matters to the proxy."""
    return b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<<>>\nendobj\n%%EOF\n"


@pytest.fixture
def sample_pdf_base64(sample_pdf_bytes) -> str:
    return base64.b64encode(sample_pdf_bytes).decode("ascii")


@pytest.fixture
def json_store(tmp_path):
    from mockup_proxy.services.send_log_store import JsonFileSendLogStore

    return JsonFileSendLogStore(str(tmp_path / "docusign-logs.json"), max_entries=1000)


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient routed straight into the FastAPI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from mockup_proxy.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
