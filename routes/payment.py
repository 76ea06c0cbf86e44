"""
Payment routes: hosted Stripe checkout, billing portal, scheduled rent invoices and
price configuration check.
"""
import stripe
from flask import Blueprint, request, jsonify, current_app

from utils.payment_gateway import (
    get_price_ids, get_base_url, create_checkout_session, create_portal_session, schedule_next_invoice,
)
from utils.request_helper import json_body, text_field

payment_bp = Blueprint('payment', __name__, url_prefix='/api')

PLANS = ('weekly', 'monthly')


@payment_bp.route('/checkout', methods=['POST'])
def checkout():
    """Create a subscription checkout session and return its URL."""
    data = json_body()
    plan = text_field(data, 'plan')
    first = text_field(data, 'first')
    last = text_field(data, 'last')
    email = text_field(data, 'email')
    phone = text_field(data, 'phone')

    if not plan or not first or not last or not email:
        return jsonify({"success": False, "message": "Missing required fields"}), 400

    prices, _ = get_price_ids()
    if plan not in PLANS or not prices.get(plan):
        return jsonify({
            "success": False,
            "message": "Missing recurring price env vars",
            "planReceived": plan,
            "hasWeekly": bool(prices['weekly']),
            "hasMonthly": bool(prices['monthly']),
        }), 500

    try:
        url = create_checkout_session(
            plan, first, last, email, phone,
            base_url=get_base_url(request),
            force_move_in=bool(data.get('forceMoveIn')),
        )
    except stripe.StripeError as e:
        current_app.logger.error(f"Checkout error for {email}: {str(e)}", exc_info=True)
        return jsonify({"success": False, "message": f"Server error: {e.user_message or str(e)}"}), 500

    if not url:
        return jsonify({"success": False, "message": "No checkout URL returned"}), 500
    return jsonify({"url": url})


@payment_bp.route('/portal', methods=['POST'])
def portal():
    """Billing portal for an existing customer, looked up by checkout session or email."""
    data = json_body()
    session_id = text_field(data, 'sessionId')
    email = text_field(data, 'email')
    try:
        url = create_portal_session(get_base_url(request), session_id=session_id or None, email=email or None)
    except stripe.StripeError as e:
        current_app.logger.error(f"Portal error: {str(e)}", exc_info=True)
        return jsonify({"success": False, "message": f"Portal error: {e.user_message or str(e)}"}), 500

    if not url:
        return jsonify({"success": False, "message": "No customer found"}), 404
    return jsonify({"url": url})


@payment_bp.route('/invoices/schedule-next', methods=['POST'])
def schedule_next():
    """Draft the next rent invoice and schedule Stripe to finalize it two days before it is due."""
    data = json_body()
    email = text_field(data, 'email')
    amount_cents = _positive_int(data.get('amount_cents'))
    due_date = _positive_int(data.get('due_date_epoch'))
    currency = (text_field(data, 'currency') or 'usd').lower()
    product_name = text_field(data, 'product_name') or 'Rent'

    if not email or not amount_cents or not due_date:
        return jsonify({"success": False, "error": "Missing required fields: email, amount_cents, due_date_epoch"}), 400

    try:
        scheduled = schedule_next_invoice(email, amount_cents, due_date, currency=currency, product_name=product_name)
    except stripe.StripeError as e:
        current_app.logger.error(f"Invoice scheduling error for {email}: {str(e)}", exc_info=True)
        return jsonify({"success": False, "error": e.user_message or str(e)}), 500

    current_app.logger.info(f"Scheduled invoice {scheduled['invoice_id']} for {email}, finalizes at {scheduled['finalize_at']}")
    return jsonify({
        "ok": True,
        "invoice_id": scheduled['invoice_id'],
        "finalize_at": scheduled['finalize_at'],
        "due_date": due_date,
        "customer_id": scheduled['customer_id'],
        "email": email,
        "amount_cents": amount_cents,
        "currency": currency,
        "product_name": product_name,
    })


def _positive_int(value):
    """Whole positive number from JSON, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    if value <= 0:
        return None
    return int(value)


@payment_bp.route('/health/prices', methods=['GET'])
def health_prices():
    """Report which Stripe price ids are configured."""
    prices, missing = get_price_ids()
    return jsonify({
        "env": current_app.config.get('ENV_NAME'),
        "has": {name: bool(value) for name, value in prices.items()},
        "missing": missing,
    })
