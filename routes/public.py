"""
Public routes: landing, application wizard, thank-you and terms pages, plus small diagnostics
"""
import re

from flask import render_template, Blueprint, request, jsonify, current_app

from utils.door_code import CHECK_IN_HOUR, CHECK_OUT_HOUR, STAY_DAYS
from utils.mail import mail_configured, send_email

public_bp = Blueprint('public', __name__)


def extract_email(addr):
    """'Relax Inn <desk@relaxinn.com>' -> 'desk@relaxinn.com'."""
    if not addr:
        return ''
    match = re.search(r'<([^>]+)>', addr)
    return (match.group(1) if match else addr).strip()


def domain_of(addr):
    at = addr.rfind('@')
    return addr[at + 1:].lower() if at > -1 else ''


@public_bp.route('/')
def home():
    return render_template('index.html')


@public_bp.route('/apply')
def apply():
    """Application wizard: email code, ID check, then checkout."""
    return render_template(
        'apply.html',
        check_in_hour=CHECK_IN_HOUR,
        check_out_hour=CHECK_OUT_HOUR,
        stay_days=STAY_DAYS,
    )


@public_bp.route('/thank-you')
def thank_you():
    return render_template('thank_you.html', session_id=request.args.get('session_id', ''))


@public_bp.route('/terms')
def terms():
    return render_template('terms.html')


@public_bp.route('/api/ok')
def ok():
    return jsonify({"ok": True})


@public_bp.route('/api/test-email')
def test_email():
    """
    GET shows mail configuration; ?send=1 attempts a send to TEST_RECIPIENT
    (or ?to=you@domain.com).
    """
    sender_raw = current_app.config.get('MAIL_DEFAULT_SENDER') or ''
    sender = extract_email(sender_raw)
    to = extract_email(request.args.get('to') or current_app.config.get('TEST_RECIPIENT') or '')

    info = {
        "ok": True,
        "route": "/api/test-email",
        "hasMailServer": bool(current_app.config.get('MAIL_SERVER')),
        "senderEmail": sender_raw,
        "senderDomain": domain_of(sender),
        "testRecipient": to,
        "recipientDomain": domain_of(to),
    }

    if not request.args.get('send'):
        return jsonify(info)

    if not mail_configured() or not sender or not to:
        return jsonify({
            **info,
            "sendAttempted": False,
            "error": "Missing MAIL_SERVER or MAIL_DEFAULT_SENDER or TEST_RECIPIENT",
        }), 400

    try:
        send_email(
            "Relax Inn - test message",
            [to],
            "This is a test message from /api/test-email.",
            reply_to=sender,
        )
    except Exception as e:
        current_app.logger.error(f"Test email to {to} failed: {str(e)}", exc_info=True)
        return jsonify({**info, "sendAttempted": True, "sent": False, "error": str(e)})
    return jsonify({**info, "sendAttempted": True, "sent": True})
