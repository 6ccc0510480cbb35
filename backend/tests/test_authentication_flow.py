"""Unit tests for the login decision."""
from portal.authentication import evaluate_login
from portal.errors import INVALID_CREDENTIALS, AccountDeactivated, AuthenticationError
from portal.models import Role, User


def _user(role: Role = Role.EMPLOYEE, active: bool = True) -> User:
    return User(
        username="jdoe",
        email="j.doe@eil.com",
        password_hash="unused",
        role=role,
        first_name="J",
        last_name="Doe",
        is_active=active,
    )


def test_accepts_matching_role_and_password() -> None:
    assert evaluate_login(_user(), Role.EMPLOYEE, True) is None


def test_unknown_user_wrong_role_and_wrong_password_look_the_same() -> None:
    outcomes = [
        evaluate_login(None, Role.EMPLOYEE, False),
        evaluate_login(_user(role=Role.TRAINEE), Role.EMPLOYEE, True),
        evaluate_login(_user(), Role.EMPLOYEE, False),
    ]

    for outcome in outcomes:
        assert type(outcome) is AuthenticationError
        assert outcome.status_code == 401
        assert outcome.detail == INVALID_CREDENTIALS


def test_deactivated_account_is_reported() -> None:
    outcome = evaluate_login(_user(active=False), Role.EMPLOYEE, True)

    assert isinstance(outcome, AccountDeactivated)
    assert outcome.status_code == 401
    assert outcome.detail == "Account is deactivated"


def test_role_mismatch_wins_over_deactivation() -> None:
    outcome = evaluate_login(_user(role=Role.MANAGEMENT, active=False), Role.EMPLOYEE, True)

    assert outcome.detail == INVALID_CREDENTIALS
