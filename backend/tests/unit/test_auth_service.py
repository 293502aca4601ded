from datetime import timedelta
from pathlib import Path

import pytest

from backend.src.services import config as config_module
from backend.src.services.auth import MFA_PURPOSE, AuthError, AuthService


def test_auth_service_requires_secret(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "chat.db"))

    cfg = config_module.reload_config()
    service = AuthService(config=cfg)

    with pytest.raises(AuthError) as excinfo:
        service.create_jwt("user-123")

    assert excinfo.value.error == "missing_jwt_secret"


def test_auth_service_signs_and_validates_with_secret(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("JWT_SECRET_KEY", "a-secure-secret-value-0123456789abcdef")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "chat.db"))

    cfg = config_module.reload_config()
    service = AuthService(config=cfg)

    token = service.create_jwt("user-123")
    payload = service.validate_jwt(token)

    assert payload.sub == "user-123"
    assert payload.purpose is None


def test_expired_token_is_rejected(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("JWT_SECRET_KEY", "a-secure-secret-value-0123456789abcdef")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "chat.db"))

    service = AuthService(config=config_module.reload_config())
    token = service.create_jwt("user-123", expires_in=timedelta(seconds=-10))

    with pytest.raises(AuthError) as excinfo:
        service.validate_jwt(token)

    assert excinfo.value.error == "token_expired"


def test_mfa_tokens_cannot_call_the_api(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("JWT_SECRET_KEY", "a-secure-secret-value-0123456789abcdef")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "chat.db"))

    service = AuthService(config=config_module.reload_config())
    token = service.create_jwt("user-123", purpose=MFA_PURPOSE)

    with pytest.raises(AuthError) as excinfo:
        service.validate_jwt(token)

    assert excinfo.value.error == "invalid_token"
