from unittest.mock import Mock, patch

import pytest

from eventhub.core.errors import EventFull, StoreUnavailable
from eventhub.core.retry import retry_store_unavailable


def test_retries_with_linear_backoff():
    fn = Mock(side_effect=[StoreUnavailable(), StoreUnavailable(), "ok"])
    fn.__name__ = "fn"

    with patch("eventhub.core.retry.time.sleep") as sleep:
        assert retry_store_unavailable(fn, attempts=3, backoff=0.5)() == "ok"

    assert fn.call_count == 3
    assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.0]


def test_gives_up_after_attempts():
    fn = Mock(side_effect=StoreUnavailable())
    fn.__name__ = "fn"

    with patch("eventhub.core.retry.time.sleep"), pytest.raises(StoreUnavailable):
        retry_store_unavailable(fn, attempts=3, backoff=0)()

    assert fn.call_count == 3


def test_domain_errors_are_not_retried():
    fn = Mock(side_effect=EventFull())
    fn.__name__ = "fn"

    with pytest.raises(EventFull):
        retry_store_unavailable(fn, attempts=3, backoff=0)()

    assert fn.call_count == 1
