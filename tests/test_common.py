import pytest

from cloudnuke.common import (
    AwsResource,
    FatalError,
    MultiError,
    do_with_retry,
    error_code,
    region_of,
)


class FakeClientError(Exception):
    def __init__(self, code):
        super().__init__(f"An error occurred ({code})")
        self.response = {"Error": {"Code": code, "Message": "failure"}}


class CodedError(Exception):
    def __init__(self, code):
        super().__init__(code)
        self.code = code


class FakeSession:
    def __init__(self, region_name):
        self.region_name = region_name


def test_error_code_from_response():
    assert error_code(FakeClientError("AuthFailure")) == "AuthFailure"


def test_error_code_from_attribute():
    assert error_code(CodedError("LoadBalancerNotFound")) == "LoadBalancerNotFound"


def test_error_code_absent():
    assert error_code(ValueError("boom")) is None


def test_region_of():
    assert region_of(FakeSession("eu-west-3")) == "eu-west-3"


def test_retry_succeeds_after_failures():
    calls = []
    sleeps = []

    def action():
        calls.append(1)
        if len(calls) < 3:
            raise RuntimeError("not yet")
        return "done"

    result = do_with_retry("Waiting", 10, 2, action, sleep=sleeps.append)
    assert result == "done"
    assert len(calls) == 3
    assert sleeps == [2, 2]


def test_retry_fatal_error_stops_immediately():
    calls = []
    sleeps = []
    underlying = FakeClientError("AccessDenied")

    def action():
        calls.append(1)
        raise FatalError(underlying)

    with pytest.raises(FakeClientError) as info:
        do_with_retry("Delete", 10, 2, action, sleep=sleeps.append)
    assert info.value is underlying
    assert len(calls) == 1
    assert sleeps == []


def test_retry_exhausted_raises_timeout():
    sleeps = []

    def action():
        raise RuntimeError("still failing")

    with pytest.raises(TimeoutError) as info:
        do_with_retry("Delete Login Profile", 10, 2, action, sleep=sleeps.append)
    assert len(sleeps) == 10
    assert "Delete Login Profile" in str(info.value)
    assert isinstance(info.value.__cause__, RuntimeError)


def test_fatal_error_keeps_underlying():
    underlying = ValueError("bad")
    fatal = FatalError(underlying)
    assert fatal.underlying is underlying
    assert str(fatal) == "bad"


def test_multi_error_lists_every_error():
    first = RuntimeError("first failure")
    second = RuntimeError("second failure")
    multi = MultiError([first, second])
    assert multi.errors == [first, second]
    text = str(multi)
    assert "first failure" in text
    assert "second failure" in text
    assert text.startswith("2 errors occurred")


def test_multi_error_single():
    multi = MultiError([RuntimeError("only")])
    assert str(multi).startswith("1 error occurred")
    assert len(multi.errors) == 1


def test_aws_resource_is_abstract():
    with pytest.raises(TypeError):
        AwsResource()