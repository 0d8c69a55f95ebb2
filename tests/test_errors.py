"""Tests for the failure taxonomy."""

import pytest

import errors
from errors import ErrorKind, VirtualCamError, user_message


def test_every_kind_has_distinct_message():
    messages = [user_message(k) for k in ErrorKind]
    assert len(set(messages)) == len(ErrorKind)
    for title, text in messages:
        assert title and text


@pytest.mark.parametrize(
    "cls, kind",
    [
        (errors.ModuleCheckFailed, ErrorKind.MODULE_CHECK_FAILED),
        (errors.ModuleLoadFailed, ErrorKind.MODULE_LOAD_FAILED),
    ],
)
def test_exception_carries_kind(cls, kind):
    e = cls()
    assert isinstance(e, VirtualCamError)
    assert isinstance(e, RuntimeError)
    assert e.kind is kind
    assert str(e) == user_message(kind)[1]
    assert str(cls("detail")) == "detail"


def test_only_module_failures_are_exceptions():
    raised = {cls.kind for cls in VirtualCamError.__subclasses__()}
    assert raised == {ErrorKind.MODULE_CHECK_FAILED, ErrorKind.MODULE_LOAD_FAILED}
