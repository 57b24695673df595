import sys
from pathlib import Path
from typing import Any, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fastapi.testclient import TestClient  # noqa: E402

from pansou.gateway.app import create_app  # noqa: E402
from pansou.gateway.config import GatewaySettings  # noqa: E402
from pansou.gateway.models import SearchRequest  # noqa: E402

TOKEN = "secret1"
AUTH_HEADERS = {"Authorization": f"Bearer {TOKEN}"}
DEFAULT_CHANNELS = ["tgsearchers3", "yunpanx"]


class FakeEngine:
    """Records canonical requests instead of searching."""

    def __init__(
        self,
        result: Any = None,
        error: Optional[Exception] = None,
        plugin_names: Optional[List[str]] = None,
    ) -> None:
        self.result = result if result is not None else {"total": 0, "merged_by_type": {}}
        self.error = error
        self.plugin_names = plugin_names if plugin_names is not None else ["labi", "pansearch"]
        self.calls: List[SearchRequest] = []

    async def search(self, request: SearchRequest) -> Any:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.result

    async def plugins(self) -> List[str]:
        return list(self.plugin_names)


def make_settings(**overrides: Any) -> GatewaySettings:
    values: dict[str, Any] = {
        "api_token": TOKEN,
        "default_channels": list(DEFAULT_CHANNELS),
        "async_plugin_enabled": True,
        "douban_base_url": "https://movie.douban.com",
        "image_allowed_domains": ["douban.com", "doubanio.com"],
        "cors_origins": ["*"],
        "log_level": "WARNING",
    }
    values.update(overrides)
    return GatewaySettings(**values)


@pytest.fixture
def settings() -> GatewaySettings:
    return make_settings()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def client(settings: GatewaySettings, engine: FakeEngine):
    app = create_app(settings=settings, engine=engine)
    with TestClient(app) as test_client:
        yield test_client
