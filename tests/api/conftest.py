from __future__ import annotations

import pytest

from university_erp.common.auth import issue_token
from university_erp.container import build_services
from university_erp.main import create_app


@pytest.fixture
def container(hr_repo, payroll_repo, certification_repo, multicampus_repo, admission_repo, finance_repo):
    return build_services(
        conn=None,
        hr_repo=hr_repo,
        payroll_repo=payroll_repo,
        certification_repo=certification_repo,
        multicampus_repo=multicampus_repo,
        admission_repo=admission_repo,
        finance_repo=finance_repo,
    )


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


@pytest.fixture
def bearer():
    def make(payload: dict, secret: str = "test-secret") -> dict:
        return {"Authorization": f"Bearer {issue_token(secret, payload)}"}

    return make


@pytest.fixture
def auth_headers(bearer):
    return bearer({"userId": 5, "id": 99})
