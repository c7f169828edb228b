from flask_mail import Message
from flask import current_app
from ..extensions import mail

def send_email(to_email: str, subject: str, body: str) -> None:
    sender = current_app.config.get("MAIL_DEFAULT_SENDER")
    if not sender:
        # Fail fast with a meaningful message (instead of Flask-Mail assertion)
        raise RuntimeError(
            "MAIL_DEFAULT_SENDER is not configured. Set MAIL_DEFAULT_SENDER in .env"
        )
    msg = Message(subject=subject, recipients=[to_email], body=body, sender=sender)
    mail.send(msg)


def send_password_reset_email(to_email: str, reset_token: str) -> bool:
    """
    Fire-and-forget: a mail failure is logged and reported as False, the
    caller's reply to the client stays the same either way.
    """
    reset_url = f"{current_app.config['PASSWORD_RESET_URL'].rstrip('/')}/{reset_token}"
    body = (
        "You requested a password reset. Use the link below to choose a new password:\n\n"
        f"{reset_url}\n\n"
        f"The link expires in {current_app.config['RESET_TOKEN_TTL_SECONDS'] // 60} minutes.\n"
        "If you did not request this, please ignore this email."
    )
    try:
        send_email(to_email, "Password Reset Request", body)
        return True
    except Exception:
        current_app.logger.exception("Password reset email could not be sent")
        return False
