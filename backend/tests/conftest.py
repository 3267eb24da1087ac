import os

# Must be set before usermgmt is imported: settings and the engine are built at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SENDGRID_APIKEY"] = ""

import pytest
from fastapi.testclient import TestClient
from usermgmt.api.dependencies import get_email_sender
from usermgmt.core.database import Base, SessionLocal, engine
from usermgmt.core.exceptions import EmailDeliveryError
from usermgmt.main import app


class FakeEmailSender:
    """Records verification emails instead of calling SendGrid"""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send_verification_email(self, to_email: str, token: str) -> None:
        if self.fail:
            raise EmailDeliveryError()
        self.sent.append((to_email, token))

    def last_token_for(self, email: str) -> str:
        return [token for to_email, token in self.sent if to_email == email][-1]


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def client(email_sender):
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
