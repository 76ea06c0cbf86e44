"""
Stripe webhook receiver: issues a demo door code when an invoice is paid.
"""
import stripe
from flask import Blueprint, request, jsonify, current_app

from utils.door_code import generate_door_code, stay_window
from utils.mail import mail_configured, send_door_code_email
from utils.payment_gateway import construct_webhook_event, get_customer_email, stripe_value

webhook_bp = Blueprint('webhook', __name__, url_prefix='/api')


@webhook_bp.route('/webhook', methods=['GET'])
def webhook_status():
    """Quick check that the route and Stripe settings are live."""
    return jsonify({
        "ok": True,
        "route": "/api/webhook",
        "hasWebhookSecret": bool(current_app.config.get('STRIPE_WEBHOOK_SECRET')),
        "hasStripeSecret": bool(current_app.config.get('STRIPE_SECRET_KEY')),
    })


@webhook_bp.route('/webhook', methods=['POST'])
def webhook():
    signature = request.headers.get('Stripe-Signature')
    payload = request.get_data()
    current_app.logger.info(
        f"POST /api/webhook signature={'yes' if signature else 'no'} bytes={len(payload)}"
    )

    if not current_app.config.get('STRIPE_WEBHOOK_SECRET'):
        current_app.logger.error("Webhook received but STRIPE_WEBHOOK_SECRET is not set")
        return jsonify({"success": False, "message": "Webhook Error: webhook secret not configured"}), 400
    if not signature:
        return jsonify({"success": False, "message": "Webhook Error: missing Stripe-Signature header"}), 400

    try:
        event = construct_webhook_event(payload, signature)
    except (ValueError, stripe.SignatureVerificationError) as e:
        current_app.logger.error(f"Webhook verify error: {str(e)}")
        return jsonify({"success": False, "message": f"Webhook Error: {str(e)}"}), 400

    event_type = event['type']
    current_app.logger.info(f"Verified webhook event: {event_type}")

    if event_type == 'invoice.payment_succeeded':
        handle_invoice_paid(event['data']['object'])
    elif event_type == 'invoice.payment_failed':
        current_app.logger.warning("invoice.payment_failed")
    elif event_type == 'customer.subscription.deleted':
        current_app.logger.info("customer.subscription.deleted (revoke code in prod)")

    return jsonify({"received": True})


def _plan_interval(invoice):
    """'week' or 'month' from the invoice's first line item, if present."""
    return stripe_value(invoice, 'lines', 'data', 0, 'price', 'recurring', 'interval')


def handle_invoice_paid(invoice):
    """Generate and deliver a door code for a paid invoice. Returns the code."""
    email = stripe_value(invoice, 'customer_email')
    customer_id = stripe_value(invoice, 'customer')
    if not email and isinstance(customer_id, str):
        try:
            email = get_customer_email(customer_id)
        except stripe.StripeError as e:
            current_app.logger.error(f"Could not look up customer {customer_id}: {str(e)}", exc_info=True)

    interval = _plan_interval(invoice)
    code = generate_door_code()
    valid_from, valid_until = stay_window(interval)

    current_app.logger.info(f"Door code for {email or '(no email found)'}: {code}")
    current_app.logger.info(f"Valid {valid_from.isoformat()} -> {valid_until.isoformat()} (interval: {interval})")

    if email and mail_configured():
        try:
            send_door_code_email(email, code, valid_from, valid_until)
        except Exception as e:
            current_app.logger.error(f"Failed to email door code to {email}: {str(e)}", exc_info=True)
            # Don't fail the webhook if the email fails
    return code
