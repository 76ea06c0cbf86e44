"""
Identity verification routes (Stripe Identity, document check).
"""
import stripe
from flask import Blueprint, request, jsonify, current_app

from utils.payment_gateway import get_base_url, create_identity_session, get_identity_status
from utils.request_helper import json_body, text_field

identity_bp = Blueprint('identity', __name__, url_prefix='/api/identity')


@identity_bp.route('/start', methods=['POST'])
def start():
    """Create a verification session; the browser is redirected to its hosted URL."""
    data = json_body()
    email = text_field(data, 'email')
    first = text_field(data, 'first')
    last = text_field(data, 'last')

    if not email or not first or not last:
        return jsonify({"success": False, "message": "Fill name and email first"}), 400

    try:
        session = create_identity_session(email, first, last, get_base_url(request))
    except stripe.StripeError as e:
        current_app.logger.error(f"Identity start error for {email}: {str(e)}", exc_info=True)
        return jsonify({"success": False, "message": f"Identity error: {e.user_message or str(e)}"}), 500
    return jsonify(session)


@identity_bp.route('/status', methods=['GET'])
def status():
    """
    Poll a verification session. Always answers 200 with JSON so the
    wizard can keep polling; failures come back as ok=false.
    """
    session_id = (request.args.get('id') or '').strip()
    if not session_id:
        return jsonify({"ok": False, "error": "Missing id"})

    try:
        vs_status = get_identity_status(session_id)
    except stripe.StripeError as e:
        current_app.logger.error(f"Identity status error: {str(e)}", exc_info=True)
        return jsonify({"ok": False, "error": str(e) or "unknown"})
    return jsonify({"ok": True, "id": session_id, "status": vs_status})
