import pytest


@pytest.fixture
def anyio_backend() -> str:
    # The application is built on asyncio primitives (asyncio.Lock, asyncio.gather).
    return "asyncio"
