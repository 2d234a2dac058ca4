"""Tests for the error hierarchy."""

from __future__ import annotations

import pytest

from addrindex.errors import (
    AddrIndexError,
    NodeError,
    PageOutOfBoundsError,
    ValidationError,
    reraise_as,
)


class TestAddrIndexError:
    def test_defaults(self) -> None:
        err = AddrIndexError("something failed")
        assert str(err) == "something failed"
        assert err.status_code == 400
        assert err.to_dict() == {"message": "something failed", "error": ""}

    def test_custom_status(self) -> None:
        err = AddrIndexError("down", error="engine", status_code=503, code="not-initialized")
        assert err.status_code == 503
        assert err.code == "not-initialized"


class TestSubclasses:
    def test_validation_error(self) -> None:
        err = ValidationError("error parsing blockhash", error="bad")
        assert isinstance(err, AddrIndexError)
        assert err.code == "invalid-input"
        assert err.to_dict() == {"message": "error parsing blockhash", "error": "bad"}

    def test_page_out_of_bounds(self) -> None:
        err = PageOutOfBoundsError(3)
        assert err.page == 3
        assert err.to_dict() == {"message": "Out of bounds", "error": "page 3 doesn't exist"}

    def test_node_error(self) -> None:
        err = NodeError("getblock failed", error="Block not found")
        assert err.code == "node-error"
        assert err.status_code == 400


class TestReraiseAs:
    def test_keeps_node_text(self) -> None:
        with pytest.raises(NodeError) as exc_info, reraise_as("error fetching block"):
            raise NodeError("getblock failed", error="Block not found")
        assert exc_info.value.to_dict() == {
            "message": "error fetching block",
            "error": "Block not found",
        }
        assert isinstance(exc_info.value.__cause__, NodeError)

    def test_falls_back_to_message(self) -> None:
        with pytest.raises(NodeError) as exc_info, reraise_as("outer"):
            raise NodeError("inner")
        assert exc_info.value.error == "inner"

    def test_other_errors_pass_through(self) -> None:
        with pytest.raises(ValidationError), reraise_as("outer"):
            raise ValidationError("bad input")

    def test_no_error(self) -> None:
        with reraise_as("outer"):
            value = 1
        assert value == 1

    def test_keeps_status_code(self) -> None:
        with pytest.raises(NodeError) as exc_info, reraise_as("error fetching block"):
            raise NodeError("Node client not connected.", status_code=500)
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "error fetching block"
