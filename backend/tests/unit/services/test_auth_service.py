# tests/unit/services/test_auth_service.py
from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from contacts_auth.core.security import HashingError, SecretHasher
from contacts_auth.models.account import Account
from contacts_auth.models.session import RefreshSession
from contacts_auth.repositories import AccountRepository, SessionRepository
from contacts_auth.services._shared.errors import (
    EmailAlreadyInUse,
    ErrorKind,
    InvalidCredentials,
    InvalidRefreshToken,
    RefreshTokenExpired,
)
from contacts_auth.services._shared.ports import StubTokenProvider
from contacts_auth.services.accounts.dto import AccountPublicOut
from contacts_auth.services.auth.dto import (
    AuthResultOut,
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from contacts_auth.services.auth.service import AuthService
from contacts_auth.services.auth.tokens import TokenIssuer
from tests.factories import FAST_HASHER
from tests.factories.account import AccountFactory
from tests.factories.session import RefreshSessionFactory
from tests.helpers.utils import not_raises


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def service() -> AuthService:
    """Build an AuthService with the cheap hasher and a stub JWT provider."""
    issuer = TokenIssuer(
        token_provider=StubTokenProvider(),
        hasher=FAST_HASHER,
        token_cfg=AuthTokenConfig(
            access_expires=timedelta(minutes=15),
            refresh_expires=timedelta(days=7),
        ),
    )
    return AuthService(hasher=FAST_HASHER, issuer=issuer)


def _register(service: AuthService, email: str = "ana@example.com") -> AuthResultOut:
    return service.register(RegisterIn(display_name="Ana", email=email, password="ana-password"))


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def _active_count(session) -> int:
    stmt = select(func.count()).select_from(RefreshSession).where(RefreshSession.revoked_at.is_(None))
    return session.execute(stmt).scalar_one()


# ------------------------------ Register ---------------------------------- #
def test_register_returns_profile_and_tokens(service, session):
    result = _register(service)

    assert isinstance(result.account, AccountPublicOut)
    assert result.account.email == "ana@example.com"
    assert result.account.display_name == "Ana"
    assert not hasattr(result.account, "password_hash")
    assert result.access_token and result.refresh_token

    account = session.get(Account, result.account.id)
    assert account.password_hash != "ana-password"
    assert FAST_HASHER.verify(account.password_hash, "ana-password")
    assert _active_count(session) == 1


def test_register_access_token_identifies_account(service):
    result = _register(service)

    claims = service.issuer.tokens.decode(result.access_token)
    assert claims["sub"] == result.account.id
    assert claims["email"] == "ana@example.com"


def test_register_normalizes_email(service):
    result = _register(service, email="  Ana@Example.COM ")
    assert result.account.email == "ana@example.com"


def test_register_duplicate_email_is_case_insensitive(service, session):
    _register(service, email="ana@example.com")

    with pytest.raises(EmailAlreadyInUse) as excinfo:
        _register(service, email="ANA@example.com")

    assert excinfo.value.kind is ErrorKind.EMAIL_ALREADY_IN_USE
    assert _count(session, Account) == 1
    assert _count(session, RefreshSession) == 1


def test_register_unique_violation_maps_to_email_in_use(service, session, monkeypatch):
    """A concurrent insert that slips past the pre-check still maps to EmailAlreadyInUse."""
    _register(service)
    monkeypatch.setattr(AccountRepository, "exists_by_email", lambda self, email, **kw: False)

    with pytest.raises(EmailAlreadyInUse):
        _register(service, email="ana@example.com")

    assert _count(session, Account) == 1


# ------------------------------- Login ------------------------------------ #
def test_login_issues_pair_and_profile(service, session):
    account = AccountFactory(email="bob@example.com", password="bob-password")

    result = service.login(LoginIn(email="BOB@example.com", password="bob-password"))

    assert isinstance(result, AuthResultOut)
    assert result.account.id == account.id
    assert service.issuer.tokens.get_subject(result.access_token) == account.id
    assert _active_count(session) == 1


def test_login_sessions_accumulate(service, session):
    AccountFactory(email="bob@example.com", password="bob-password")

    first = service.login(LoginIn(email="bob@example.com", password="bob-password"))
    second = service.login(LoginIn(email="bob@example.com", password="bob-password"))

    assert first.refresh_token != second.refresh_token
    assert _active_count(session) == 2


def test_login_wrong_password_and_unknown_email_are_indistinguishable(service):
    AccountFactory(email="bob@example.com", password="bob-password")

    with pytest.raises(InvalidCredentials) as wrong_pw:
        service.login(LoginIn(email="bob@example.com", password="nope"))
    with pytest.raises(InvalidCredentials) as unknown:
        service.login(LoginIn(email="ghost@example.com", password="nope"))

    assert str(wrong_pw.value) == str(unknown.value)
    assert wrong_pw.value.kind is unknown.value.kind is ErrorKind.INVALID_CREDENTIALS


def test_login_upgrades_outdated_hash(service, session):
    account = AccountFactory(email="old@example.com")
    stronger = SecretHasher(time_cost=2, memory_cost=16, parallelism=1)
    account.password_hash = stronger.hash("legacy-password")
    session.flush()

    service.login(LoginIn(email="old@example.com", password="legacy-password"))

    session.expire_all()
    refreshed = session.get(Account, account.id)
    assert FAST_HASHER.needs_rehash(refreshed.password_hash) is False
    assert FAST_HASHER.verify(refreshed.password_hash, "legacy-password")


# ------------------------------ Refresh ----------------------------------- #
def test_refresh_rotates_and_blocks_reuse(service, session):
    registered = _register(service)

    pair = service.refresh(RefreshIn(refresh_token=registered.refresh_token))

    assert isinstance(pair, TokenPairOut)
    assert pair.refresh_token != registered.refresh_token
    assert _count(session, RefreshSession) == 2
    assert _active_count(session) == 1

    with pytest.raises(InvalidRefreshToken):
        service.refresh(RefreshIn(refresh_token=registered.refresh_token))


def test_refresh_issues_access_token_for_owner(service):
    registered = _register(service)

    pair = service.refresh(RefreshIn(refresh_token=registered.refresh_token))

    claims = service.issuer.tokens.decode(pair.access_token)
    assert claims["sub"] == registered.account.id
    assert claims["email"] == registered.account.email


def test_ana_register_refresh_and_reuse_scenario(service):
    """Register → refresh R1 → R2 → reuse R1 fails → R2 still rotates."""
    r1 = _register(service).refresh_token

    r2 = service.refresh(RefreshIn(refresh_token=r1)).refresh_token
    with pytest.raises(InvalidRefreshToken):
        service.refresh(RefreshIn(refresh_token=r1))

    r3 = service.refresh(RefreshIn(refresh_token=r2)).refresh_token
    assert len({r1, r2, r3}) == 3


def test_refresh_unknown_token(service):
    _register(service)

    with pytest.raises(InvalidRefreshToken) as excinfo:
        service.refresh(RefreshIn(refresh_token="not-a-real-token"))
    assert excinfo.value.kind is ErrorKind.INVALID_REFRESH_TOKEN


def test_refresh_expired_token_deletes_record(service, session, freeze_time):
    with freeze_time("2025-01-01 12:00:00") as frozen:
        token = _register(service).refresh_token
        frozen.tick(delta=timedelta(days=7, seconds=1))

        with pytest.raises(RefreshTokenExpired) as excinfo:
            service.refresh(RefreshIn(refresh_token=token))
        assert excinfo.value.kind is ErrorKind.REFRESH_TOKEN_EXPIRED
        assert _count(session, RefreshSession) == 0

        # Second presentation no longer finds the record
        with pytest.raises(InvalidRefreshToken):
            service.refresh(RefreshIn(refresh_token=token))


def test_refresh_at_exact_expiry_is_expired(service, freeze_time):
    with freeze_time("2025-01-01 12:00:00") as frozen:
        token = _register(service).refresh_token
        frozen.tick(delta=timedelta(days=7))

        with pytest.raises(RefreshTokenExpired):
            service.refresh(RefreshIn(refresh_token=token))


def test_refresh_just_before_expiry_succeeds(service, freeze_time):
    with freeze_time("2025-01-01 12:00:00") as frozen:
        token = _register(service).refresh_token
        frozen.tick(delta=timedelta(days=7) - timedelta(seconds=1))

        pair = service.refresh(RefreshIn(refresh_token=token))
        assert pair.refresh_token != token


def test_refresh_loses_race_against_concurrent_rotation(service, session, monkeypatch):
    """A scan that still sees the revoked row must fail at the conditional revoke."""
    token = _register(service).refresh_token
    service.refresh(RefreshIn(refresh_token=token))

    # Simulate a snapshot taken before the winner committed its revoke.
    monkeypatch.setattr(SessionRepository, "list_active", SessionRepository.list_all)

    with pytest.raises(InvalidRefreshToken):
        service.refresh(RefreshIn(refresh_token=token))

    assert _count(session, RefreshSession) == 2
    assert _active_count(session) == 1


def test_refresh_malformed_stored_hash_is_internal_error(service):
    RefreshSessionFactory(secret_hash="corrupted-row")

    with pytest.raises(HashingError):
        service.refresh(RefreshIn(refresh_token="anything"))


# ------------------------------- Logout ----------------------------------- #
def test_logout_revokes_only_matching_session(service, session):
    AccountFactory(email="bob@example.com", password="bob-password")
    phone = service.login(LoginIn(email="bob@example.com", password="bob-password"))
    laptop = service.login(LoginIn(email="bob@example.com", password="bob-password"))

    ack = service.logout(LogoutIn(refresh_token=phone.refresh_token))

    assert isinstance(ack, LogoutOut)
    assert ack.message
    assert _active_count(session) == 1
    with pytest.raises(InvalidRefreshToken):
        service.refresh(RefreshIn(refresh_token=phone.refresh_token))
    assert service.refresh(RefreshIn(refresh_token=laptop.refresh_token)).refresh_token


def test_logout_is_idempotent(service, session):
    token = _register(service).refresh_token

    service.logout(LogoutIn(refresh_token=token))
    first_revoked_at = session.execute(select(RefreshSession.revoked_at)).scalar_one()
    service.logout(LogoutIn(refresh_token=token))
    second_revoked_at = session.execute(select(RefreshSession.revoked_at)).scalar_one()

    assert first_revoked_at is not None
    assert first_revoked_at == second_revoked_at


def test_logout_unknown_token_acknowledges(service, session):
    _register(service)

    with not_raises(InvalidRefreshToken):
        ack = service.logout(LogoutIn(refresh_token="never-issued"))

    assert isinstance(ack, LogoutOut)
    assert _active_count(session) == 1
