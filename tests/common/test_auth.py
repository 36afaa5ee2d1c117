from __future__ import annotations

import pytest

from university_erp.common.auth import actor_id_from, issue_token, verify_token
from university_erp.core.exceptions import AuthenticationError


def test_user_id_wins_over_id():
    assert actor_id_from({"userId": 12, "id": 99}) == 12
    assert actor_id_from({"userId": "12"}) == 12


def test_falls_back_to_id():
    assert actor_id_from({"id": 99, "email": "registrar@uni.edu.pk"}) == 99


@pytest.mark.parametrize("user", [None, {}, {"email": "x@uni.edu.pk"}, {"userId": "abc"}, {"id": 0}])
def test_missing_identity_is_authentication_error(user):
    with pytest.raises(AuthenticationError):
        actor_id_from(user)


def test_token_round_trip():
    token = issue_token("secret", {"userId": 5, "role": "admin"})

    assert verify_token("secret", token) == {"userId": 5, "role": "admin"}


def test_token_signed_with_other_key_is_rejected():
    token = issue_token("secret", {"userId": 5})

    with pytest.raises(AuthenticationError) as info:
        verify_token("other", token)
    assert info.value.__cause__ is not None
