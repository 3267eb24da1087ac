from unittest.mock import MagicMock, patch
from urllib.error import URLError
import pytest
from usermgmt.core.exceptions import EmailDeliveryError
from usermgmt.services.email_service import EmailService


def make_service(**overrides):
    options = {
        "api_key": "SG.test",
        "from_email": "noreply@example.com",
        "from_name": "UserManagement",
        "base_url": "http://localhost:8080/",
    }
    options.update(overrides)
    return EmailService(**options)


def test_verification_link():
    assert make_service().verification_link("abc") == "http://localhost:8080/verify?token=abc"


def test_message_contains_link_in_both_bodies():
    message = make_service().build_verification_message("a@b.com", "abc").get()

    assert message["personalizations"][0]["to"][0]["email"] == "a@b.com"
    assert message["from"]["email"] == "noreply@example.com"
    assert message["subject"] == "Please verify your email address"
    assert {content["type"] for content in message["content"]} == {"text/plain", "text/html"}
    for content in message["content"]:
        assert "http://localhost:8080/verify?token=abc" in content["value"]


def test_send_uses_api_key_and_message():
    with patch("usermgmt.services.email_service.SendGridAPIClient") as client_cls:
        client_cls.return_value.send.return_value = MagicMock(status_code=202)
        make_service().send_verification_email("a@b.com", "abc")

    client_cls.assert_called_once_with("SG.test")
    sent = client_cls.return_value.send.call_args.args[0]
    assert sent.get()["personalizations"][0]["to"][0]["email"] == "a@b.com"


def test_send_without_api_key_fails():
    with patch("usermgmt.services.email_service.SendGridAPIClient") as client_cls:
        with pytest.raises(EmailDeliveryError):
            make_service(api_key="").send_verification_email("a@b.com", "abc")
    client_cls.assert_not_called()


def test_send_rejected_by_provider():
    with patch("usermgmt.services.email_service.SendGridAPIClient") as client_cls:
        client_cls.return_value.send.return_value = MagicMock(status_code=401)
        with pytest.raises(EmailDeliveryError):
            make_service().send_verification_email("a@b.com", "abc")


def test_send_network_error():
    with patch("usermgmt.services.email_service.SendGridAPIClient") as client_cls:
        client_cls.return_value.send.side_effect = URLError("down")
        with pytest.raises(EmailDeliveryError):
            make_service().send_verification_email("a@b.com", "abc")
