"""Tests for rm_common.errors and rm_common.response."""

from src.rm_common.errors import (
    AlreadyResolvedError,
    AppError,
    DuplicateBetError,
    HasBetsError,
    InsufficientFundsError,
    InvalidInputError,
    InvalidTransitionError,
    OptionNotFoundError,
    StorageError,
)
from src.rm_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.context == {}

    def test_custom_http_status(self) -> None:
        err = AppError(code=1001, message="Username taken", http_status=409)
        assert err.http_status == 409

    def test_is_exception(self) -> None:
        err = AppError(code=1001, message="test")
        assert isinstance(err, Exception)


class TestSpecificErrors:
    def test_insufficient_funds_carries_amounts(self) -> None:
        err = InsufficientFundsError(required=10, available=5)
        assert err.code == 2001
        assert err.http_status == 422
        assert err.kind == "InsufficientFunds"
        assert err.context == {"required": 10, "available": 5}

    def test_option_not_found_names_both_ids(self) -> None:
        err = OptionNotFoundError("EVT-1", "OPT-9")
        assert err.http_status == 404
        assert err.context == {"event_id": "EVT-1", "option_id": "OPT-9"}

    def test_already_resolved(self) -> None:
        err = AlreadyResolvedError("EVT-1")
        assert err.code == 3005
        assert err.http_status == 409

    def test_has_bets(self) -> None:
        err = HasBetsError("EVT-1", 3)
        assert err.kind == "HasBets"
        assert err.context["bet_count"] == 3

    def test_invalid_transition_keeps_context(self) -> None:
        err = InvalidTransitionError("resolved", event_id="EVT-1")
        assert err.kind == "InvalidTransition"
        assert err.context == {"event_id": "EVT-1"}

    def test_duplicate_bet(self) -> None:
        err = DuplicateBetError("u1", "EVT-1")
        assert err.code == 4001
        assert err.http_status == 409

    def test_invalid_input_surfaces_as_validation_error(self) -> None:
        err = InvalidInputError("amount", "must be a positive integer")
        assert err.kind == "ValidationError"
        assert err.context == {"field": "amount"}
        assert "amount" in err.message

    def test_storage_error_has_no_context(self) -> None:
        err = StorageError()
        assert err.http_status == 500
        assert err.context == {}


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"balance": 900})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"balance": 900}
        assert resp.request_id.startswith("req_")

    def test_error_with_kind_and_context(self) -> None:
        resp = error_response(4001, "dup", "DuplicateBet", {"event_id": "EVT-1"})
        assert resp.code == 4001
        assert resp.data == {"kind": "DuplicateBet", "event_id": "EVT-1"}

    def test_error_without_kind_has_no_data(self) -> None:
        resp = error_response(9001, "boom")
        assert resp.data is None

    def test_model_dump_shape(self) -> None:
        dumped = ApiResponse().model_dump()
        assert set(dumped) == {"code", "message", "data", "timestamp", "request_id"}
