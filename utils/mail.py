"""
Email utility functions
"""
from flask_mail import Mail, Message
from flask import current_app

mail = Mail()


def mail_configured():
    """True when the app has enough mail settings to attempt a send."""
    return bool('mail' in current_app.extensions and current_app.config.get('MAIL_SERVER') and current_app.config.get('MAIL_DEFAULT_SENDER'))


def _require_mail_config():
    if 'mail' not in current_app.extensions:
        raise RuntimeError("Mail extension not initialized. Check app configuration.")
    if not current_app.config.get('MAIL_SERVER'):
        raise RuntimeError("MAIL_SERVER not configured. Please set MAIL_SERVER environment variable.")
    if not current_app.config.get('MAIL_DEFAULT_SENDER'):
        raise RuntimeError("MAIL_DEFAULT_SENDER not configured. Please set MAIL_DEFAULT_SENDER environment variable.")


def send_email(subject, recipients, body, html=None, reply_to=None):
    """
    Send an email

    Args:
        subject: Email subject
        recipients: List of recipient email addresses
        body: Plain text body
        html: HTML body (optional)
        reply_to: Reply-To address (optional)
    """
    _require_mail_config()
    msg = Message(
        subject=subject,
        recipients=recipients,
        body=body,
        html=html,
        reply_to=reply_to,
    )
    mail.send(msg)


def send_verification_otp_email(email: str, otp: str, expires_in_minutes: int) -> None:
    """
    Send OTP verification email. Subject: "Your verification code".
    Plain body plus a small HTML version.
    """
    _require_mail_config()
    subject = "Your verification code"
    body = f"Your Relax Inn verification code is: {otp}\n\nThis code expires in {expires_in_minutes} minutes."
    html = _otp_email_html(otp, expires_in_minutes)
    msg = Message(
        subject=subject,
        recipients=[email],
        body=body,
        html=html,
    )
    try:
        mail.send(msg)
    except Exception as e:
        current_app.logger.error(f"SMTP error sending verification code to {email}: {str(e)}", exc_info=True)
        raise


def _otp_email_html(otp: str, expires_in_minutes: int) -> str:
    """Clean HTML template for OTP email."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head><meta charset="utf-8"><title>Your verification code</title></head>
    <body style="font-family: system-ui, sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2 style="color: #1a1a2e;">Verify Your Email Address</h2>
        <p>Use the code below to continue your Relax Inn application:</p>
        <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px; color: #16213e;">{otp}</p>
        <p style="color: #666;">This code expires in {expires_in_minutes} minutes. Do not share it with anyone.</p>
        <hr style="border: none; border-top: 1px solid #eee; margin: 24px 0;">
        <p style="font-size: 12px; color: #999;">If you did not request this, you can ignore this email.</p>
    </body>
    </html>
    """


class MailNotifier:
    """OTP notifier backed by Flask-Mail. Must be used inside an app context."""

    def send_otp(self, email, code, expires_in_minutes):
        send_verification_otp_email(email, code, expires_in_minutes)


def send_door_code_email(email, code, valid_from, valid_until):
    """Email the demo door code and its validity window."""
    subject = "Your Relax Inn door code"
    start = valid_from.strftime('%b %d, %Y %I:%M %p')
    end = valid_until.strftime('%b %d, %Y %I:%M %p')
    body = f"""
Thank you for your payment.

Your door code is: {code}

Valid from {start} until {end}.

Relax Inn
"""
    html = _door_code_email_html(code, start, end)
    send_email(subject, [email], body, html)


def _door_code_email_html(code, start, end) -> str:
    """HTML template for the door code email."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head><meta charset="utf-8"><title>Your door code</title></head>
    <body style="font-family: system-ui, sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2 style="color: #1a1a2e;">Your Relax Inn door code</h2>
        <p>Thank you for your payment.</p>
        <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px; color: #16213e;">{code}</p>
        <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">
            <tr><td style="padding: 8px; border-bottom: 1px solid #eee;"><strong>Valid from:</strong></td><td style="padding: 8px; border-bottom: 1px solid #eee;">{start}</td></tr>
            <tr><td style="padding: 8px;"><strong>Valid until:</strong></td><td style="padding: 8px;">{end}</td></tr>
        </table>
    </body>
    </html>
    """
