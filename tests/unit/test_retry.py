"""
Unit tests for the retry decorator.
"""

import pytest
from unittest.mock import AsyncMock, patch

from chainorders.node.exceptions import NodeRPCError, TransientError
from chainorders.utils.retry import retry_on_transient_error


@pytest.fixture
def no_sleep():
    with patch("chainorders.utils.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


@pytest.mark.asyncio
@pytest.mark.unit
async def test_returns_after_transient_failures(no_sleep):
    func = AsyncMock(side_effect=[TransientError("a"), TransientError("b"), "ok"])
    wrapped = retry_on_transient_error(max_attempts=3, backoff_base=3, base_delay=1)(func)

    assert await wrapped(1, key="v") == "ok"
    assert func.await_count == 3
    func.assert_awaited_with(1, key="v")
    assert [c.args[0] for c in no_sleep.await_args_list] == [1, 3]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reraises_last_error(no_sleep):
    func = AsyncMock(side_effect=TransientError("down"))
    wrapped = retry_on_transient_error(max_attempts=2)(func)

    with pytest.raises(TransientError, match="down"):
        await wrapped()

    assert func.await_count == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_permanent_errors_not_retried(no_sleep):
    func = AsyncMock(side_effect=NodeRPCError("execution reverted"))
    wrapped = retry_on_transient_error()(func)

    with pytest.raises(NodeRPCError):
        await wrapped()

    func.assert_awaited_once()
    no_sleep.assert_not_awaited()
