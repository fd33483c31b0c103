"""Unit tests for the Resend email adapter."""

from unittest.mock import patch

from adapters.email.resend_adapter import ResendEmailService


async def test_unconfigured_logs_and_reports_success():
    service = ResendEmailService(api_key="", from_email="Paperboy <no-reply@example.com>")

    with patch("adapters.email.resend_adapter.resend.Emails.send") as send:
        assert await service.send_welcome_email("a@example.com", "Asha") is True

    send.assert_not_called()


async def test_reset_email_links_to_frontend():
    service = ResendEmailService(api_key="re_test", from_email="Paperboy <no-reply@example.com>")

    with patch("adapters.email.resend_adapter.resend.Emails.send") as send:
        assert await service.send_password_reset_email("a@example.com", "Asha", "tok123")

    params = send.call_args.args[0]
    assert params["to"] == "a@example.com"
    assert params["from"] == "Paperboy <no-reply@example.com>"
    assert "/reset-password/tok123" in params["html"]


async def test_send_failure_returns_false():
    service = ResendEmailService(api_key="re_test", from_email="Paperboy <no-reply@example.com>")

    with patch(
        "adapters.email.resend_adapter.resend.Emails.send", side_effect=RuntimeError("quota")
    ):
        assert await service.send_welcome_email("a@example.com", "<Asha>") is False
