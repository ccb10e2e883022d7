import pytest


@pytest.fixture
def anyio_backend():
    # The code under test uses asyncio primitives directly (asyncio.gather).
    return "asyncio"
