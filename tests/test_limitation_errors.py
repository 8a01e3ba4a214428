import pytest

from webshield.limitation_errors import (
    ClientError,
    LimitationError,
    LimitExceeded,
    OtherError,
    TimeError,
)
from webshield.status import Status


def test_client_error_wraps_cause():
    cause = ConnectionError("refused")
    err = ClientError(cause)
    assert err.error is cause
    assert err.__cause__ is cause
    assert str(err) == "Redis client failed to connect or run a query"


def test_time_error_wraps_cause():
    cause = OverflowError("too big")
    err = TimeError(cause)
    assert err.error is cause
    assert str(err) == "Time conversion failed"


def test_limit_exceeded_holds_status():
    status = Status.from_count(30, 25, 1000)
    err = LimitExceeded(status)
    assert err.status.remaining == 0
    assert err.status.limit == 25
    assert str(err) == "Limit is exceeded for a key"


def test_other_error_detail_and_display():
    err = OtherError("something broke")
    assert err.detail == "something broke"
    assert str(err) == "Generic error"
    assert "something broke" in repr(err)


@pytest.mark.parametrize(
    ("err", "message"),
    [
        (ClientError(ConnectionError()), "Redis client failed to connect or run a query"),
        (LimitExceeded(Status(limit=1, remaining=0, reset_epoch_utc=0)), "Limit is exceeded for a key"),
        (TimeError(OverflowError()), "Time conversion failed"),
        (OtherError("x"), "Generic error"),
    ],
)
def test_all_errors_share_base(err, message):
    assert isinstance(err, LimitationError)
    assert str(err) == message