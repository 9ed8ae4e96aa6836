import asyncio
from types import SimpleNamespace

import orjson
import pytest

from pricesync.error_classifier import ErrorClassifier, classify_error
from pricesync.error_classifier_helpers import RETRYABLE_KINDS, USER_MESSAGES, ClassifiedError, ErrorKind
from pricesync.error_classifier_helpers.error_categorizer import kind_for_status
from pricesync.exceptions import PayloadValidationError, RemoteHTTPError


@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (401, ErrorKind.AUTH_REQUIRED),
        (403, ErrorKind.AUTH_REQUIRED),
        (404, ErrorKind.NOT_FOUND),
        (408, ErrorKind.TIMEOUT),
        (429, ErrorKind.SERVER_ERROR),
        (500, ErrorKind.SERVER_ERROR),
        (503, ErrorKind.SERVER_ERROR),
        (400, ErrorKind.VALIDATION_FAILED),
        (422, ErrorKind.VALIDATION_FAILED),
    ],
)
def test_http_status_mapping(status, kind):
    classified = classify_error(RemoteHTTPError(status, endpoint="rpc/x"))

    assert classified.kind is kind
    assert classified.status == status
    assert classified.retryable == (kind in RETRYABLE_KINDS)


def test_success_statuses_do_not_map_to_a_kind():
    assert kind_for_status(200) is None
    assert kind_for_status(304) is None


def test_transport_failures():
    assert classify_error(ConnectionRefusedError("refused")).kind is ErrorKind.NETWORK_UNREACHABLE
    assert classify_error(asyncio.TimeoutError()).kind is ErrorKind.TIMEOUT
    assert classify_error(TimeoutError("slow")).kind is ErrorKind.TIMEOUT


def test_plain_error_objects_with_codes():
    assert classify_error(SimpleNamespace(code="ECONNREFUSED")).kind is ErrorKind.NETWORK_UNREACHABLE
    assert classify_error(SimpleNamespace(code="etimedout")).kind is ErrorKind.TIMEOUT
    assert classify_error(SimpleNamespace(status=502)).kind is ErrorKind.SERVER_ERROR


def test_malformed_payloads_are_validation_failures():
    with pytest.raises(orjson.JSONDecodeError) as excinfo:
        orjson.loads(b"{not json")

    assert classify_error(excinfo.value).kind is ErrorKind.VALIDATION_FAILED
    assert classify_error(PayloadValidationError()).kind is ErrorKind.VALIDATION_FAILED


def test_unknown_errors_are_not_retryable():
    classified = classify_error(RuntimeError("boom"))

    assert classified.kind is ErrorKind.UNKNOWN
    assert classified.retryable is False
    assert classified.user_message == USER_MESSAGES[ErrorKind.UNKNOWN]
    assert classified.error_type == "RuntimeError"


def test_classification_is_deterministic_and_idempotent():
    classifier = ErrorClassifier()
    error = RemoteHTTPError(503)

    first = classifier.classify(error)
    assert classifier.classify(error) == first
    assert classifier.classify(first) is first


def test_every_kind_has_a_user_message():
    for kind in ErrorKind:
        assert ClassifiedError.of(kind).user_message == USER_MESSAGES[kind]


def test_describe_includes_server_status():
    assert ClassifiedError.of(ErrorKind.SERVER_ERROR, status=503).describe() == "server_error(503)"
    assert ClassifiedError.of(ErrorKind.NOT_FOUND, status=404).describe() == "not_found"
