"""Tests for caller capabilities and the error taxonomy."""

from uuid import uuid4

import pytest

from campus_cart.core.actor import Actor, Role
from campus_cart.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)


class TestActor:
    def test_require_matching_role(self):
        actor = Actor(id=uuid4(), role=Role.SELLER)

        assert actor.require(Role.SELLER) is actor

    def test_require_any_of_roles(self):
        actor = Actor(id=uuid4(), role=Role.ADMIN)

        assert actor.require(Role.RIDER, Role.ADMIN) is actor

    def test_require_wrong_role_forbidden(self):
        actor = Actor(id=uuid4(), role=Role.BUYER)

        with pytest.raises(ForbiddenError) as exc_info:
            actor.require(Role.RIDER)

        assert exc_info.value.code == "ROLE_REQUIRED"
        assert exc_info.value.status_code == 403

    def test_role_from_stored_string(self):
        assert Role("rider") is Role.RIDER


class TestErrors:
    @pytest.mark.parametrize(
        "error_cls,status_code",
        [
            (NotFoundError, 404),
            (ConflictError, 409),
            (InvalidStateError, 409),
            (InvalidInputError, 400),
            (ForbiddenError, 403),
        ],
    )
    def test_status_codes(self, error_cls, status_code):
        assert error_cls("boom").status_code == status_code

    def test_invalid_state_is_a_conflict(self):
        assert issubclass(InvalidStateError, ConflictError)

    def test_detail_carries_code_and_message(self):
        error = ConflictError("Delivery already assigned", code="DELIVERY_ALREADY_ASSIGNED")

        assert error.to_detail() == {
            "code": "DELIVERY_ALREADY_ASSIGNED",
            "message": "Delivery already assigned",
        }

    def test_default_code(self):
        assert NotFoundError("missing").code == "NOT_FOUND"
