"""
Email OTP routes: issue a signed token and verify a code against it.
"""
from flask import Blueprint, jsonify, current_app

from utils.mail import MailNotifier
from utils.request_helper import json_body, text_field
from utils.verification_token import OTPConfig, OTPIssuer, OTPVerifier, OTPError

otp_bp = Blueprint('otp', __name__, url_prefix='/api/otp')


def _otp_config():
    return OTPConfig(
        secret=current_app.config['APP_SECRET'],
        ttl_seconds=current_app.config.get('OTP_TTL_MINUTES', 10) * 60,
    )


@otp_bp.errorhandler(OTPError)
def handle_otp_error(e):
    current_app.logger.info(f"OTP request rejected: {e.error}")
    return jsonify(e.to_dict()), 400


@otp_bp.route('/start', methods=['POST'])
def start():
    """Send a 6-digit code to the email and return the token that proves it was issued."""
    data = json_body()
    email = text_field(data, 'email')
    issuer = OTPIssuer(_otp_config(), notifier=MailNotifier())
    result = issuer.issue(email)
    current_app.logger.info(f"Issued verification code for {email}")
    return jsonify(result)


@otp_bp.route('/verify', methods=['POST'])
def verify():
    """Check the user-entered code against the token from /start."""
    data = json_body()
    verifier = OTPVerifier(_otp_config())
    result = verifier.verify(text_field(data, 'email'), text_field(data, 'code'), text_field(data, 'token'))
    return jsonify(result)
