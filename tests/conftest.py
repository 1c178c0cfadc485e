import pytest
import httpx

from assetstudio.core import settings as settings_module
from assetstudio.main import app
from assetstudio.services import sessions


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _isolated_studio(tmp_path, monkeypatch):
    monkeypatch.setattr(settings_module.settings, "media_root", str(tmp_path / "media"))
    sessions.clear_sessions()
    yield
    sessions.clear_sessions()
    app.dependency_overrides.clear()


@pytest.fixture()
async def client():
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
