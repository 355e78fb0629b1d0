"""
Email Service - verification emails over SMTP.

When SMTP_HOST is not configured the code is only logged, which keeps local
development and tests offline.
"""

import logging
import smtplib
from email.message import EmailMessage

from app.core.config import get_settings
from app.core.errors import DependencyError

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verify Your Email - Career Platform"

VERIFICATION_BODY = """\
Thank you for joining Career Platform!

Your verification code is: {code}

Please enter this code on the website to verify your account.

Best regards,
Career Platform Team
"""


def send_verification_email(email: str, code: str) -> bool:
    """
    Send a verification code.

    Returns:
        True when an email was handed to the SMTP server, False when SMTP is
        not configured.

    Raises:
        DependencyError: the SMTP server could not be reached or refused the mail
    """
    settings = get_settings()
    if not settings.smtp_host:
        logger.info("SMTP not configured; verification code for %s: %s", email, code)
        return False

    message = EmailMessage()
    message["Subject"] = VERIFICATION_SUBJECT
    message["From"] = settings.email_from
    message["To"] = email
    message.set_content(VERIFICATION_BODY.format(code=code))

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            smtp.starttls()
            if settings.smtp_user:
                smtp.login(settings.smtp_user, settings.smtp_password)
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        raise DependencyError(f"Failed to send verification email to {email}: {e}") from e

    logger.info("Verification email sent to %s", email)
    return True
