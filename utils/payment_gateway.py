"""
Stripe helpers: checkout, billing portal, identity sessions, invoice scheduling and webhooks.
All calls pass the secret key explicitly instead of setting stripe.api_key globally.
"""
import time

import stripe
from flask import current_app

PRICE_ENV = {
    'weekly': 'STRIPE_PRICE_WEEKLY',
    'monthly': 'STRIPE_PRICE_MONTHLY',
    'movein': 'STRIPE_PRICE_MOVEIN',
}

FINALIZE_LEAD_SECONDS = 2 * 24 * 60 * 60
FINALIZE_MIN_DELAY_SECONDS = 300


def _api_key():
    return current_app.config.get('STRIPE_SECRET_KEY')


def get_price_ids():
    """Return configured price ids plus the names of any missing settings."""
    prices = {name: current_app.config.get(key) for name, key in PRICE_ENV.items()}
    missing = [PRICE_ENV[name] for name, value in prices.items() if not value]
    return prices, missing


def get_base_url(request):
    """BASE_URL setting, else derived from the forwarded proto and host headers."""
    base_url = current_app.config.get('BASE_URL')
    if base_url:
        return base_url.rstrip('/')
    host = request.headers.get('Host')
    proto = request.headers.get('X-Forwarded-Proto', 'https')
    return f"{proto}://{host}" if host else ''


def find_customer_by_email(email):
    existing = stripe.Customer.list(email=email, limit=1, api_key=_api_key())
    return existing.data[0] if existing.data else None


def is_first_paid_invoice(customer):
    """True when the customer has never paid an invoice (or does not exist yet)."""
    if customer is None:
        return True
    paid = stripe.Invoice.list(customer=customer.id, status='paid', limit=1, api_key=_api_key())
    return len(paid.data) == 0


def create_checkout_session(plan, first, last, email, phone, base_url, force_move_in=False):
    """
    Create a subscription Checkout Session for the weekly or monthly plan.
    The move-in fee is added on the first paid invoice, or when forced.

    Returns:
        str: hosted checkout URL
    """
    prices, _ = get_price_ids()
    customer = find_customer_by_email(email)
    add_move_in = bool((is_first_paid_invoice(customer) or force_move_in) and prices['movein'])

    line_items = [{'price': prices[plan], 'quantity': 1}]
    if add_move_in:
        line_items.append({'price': prices['movein'], 'quantity': 1})

    metadata = {
        'first': first,
        'last': last,
        'email': email,
        'phone': phone or '',
        'plan': plan,
        'move_in_fee_applied': 'true' if add_move_in else 'false',
    }
    params = {
        'mode': 'subscription',
        'line_items': line_items,
        'allow_promotion_codes': True,
        'consent_collection': {'terms_of_service': 'required'},
        'success_url': f"{base_url}/thank-you?session_id={{CHECKOUT_SESSION_ID}}",
        'cancel_url': f"{base_url}/apply",
        'metadata': metadata,
        'subscription_data': {'metadata': metadata},
    }
    if customer is not None:
        params['customer'] = customer.id
    else:
        params['customer_email'] = email

    session = stripe.checkout.Session.create(api_key=_api_key(), **params)
    return session.url


def create_portal_session(base_url, session_id=None, email=None):
    """Billing portal URL for the customer behind a checkout session or email; None if not found."""
    customer_id = None
    if session_id:
        session = stripe.checkout.Session.retrieve(session_id, api_key=_api_key())
        customer = session.customer
        customer_id = customer if isinstance(customer, str) else getattr(customer, 'id', None)
    elif email:
        customer = find_customer_by_email(email)
        customer_id = customer.id if customer else None

    if not customer_id:
        return None

    portal = stripe.billing_portal.Session.create(
        customer=customer_id,
        return_url=f"{base_url}/apply",
        api_key=_api_key(),
    )
    return portal.url


def create_identity_session(email, first, last, base_url):
    """Start a document VerificationSession; guest returns to the application page."""
    session = stripe.identity.VerificationSession.create(
        type='document',
        metadata={'email': email, 'first': first, 'last': last},
        options={'document': {'require_matching_selfie': False}},
        return_url=f"{base_url}/apply",
        api_key=_api_key(),
    )
    return {'id': session.id, 'url': session.url}


def get_identity_status(session_id):
    """One of 'verified', 'processing', 'requires_input', 'canceled'."""
    session = stripe.identity.VerificationSession.retrieve(session_id, api_key=_api_key())
    return session.status


def construct_webhook_event(payload, signature):
    """Verify the Stripe-Signature header; raises ValueError or stripe.SignatureVerificationError."""
    return stripe.Webhook.construct_event(
        payload,
        signature,
        current_app.config.get('STRIPE_WEBHOOK_SECRET'),
    )


def stripe_value(obj, *path):
    """
    Walk nested Stripe objects (or plain dicts) by key or list index.
    Returns None as soon as a step is missing. Newer SDKs' StripeObject is not a dict,
    so only `in` and subscripts are used.
    """
    for key in path:
        if obj is None or isinstance(obj, str):
            return None
        if isinstance(key, int):
            if not isinstance(obj, (list, tuple)) or len(obj) <= key:
                return None
        elif key not in obj:
            return None
        obj = obj[key]
    return obj


def get_customer_email(customer_id):
    customer = stripe.Customer.retrieve(customer_id, api_key=_api_key())
    return stripe_value(customer, 'email')


def finalize_at(due_date_epoch, now=None):
    """Two days before the due date, but never sooner than five minutes from now."""
    now = int(time.time()) if now is None else now
    return max(due_date_epoch - FINALIZE_LEAD_SECONDS, now + FINALIZE_MIN_DELAY_SECONDS)


def find_or_create_customer(email):
    escaped = email.replace("'", "\\'")
    found = stripe.Customer.search(query=f"email:'{escaped}'", limit=1, api_key=_api_key())
    if found.data:
        return found.data[0]
    return stripe.Customer.create(email=email, api_key=_api_key())


def schedule_next_invoice(email, amount_cents, due_date_epoch, currency='usd', product_name='Rent'):
    """
    Draft a one-line send_invoice invoice due at `due_date_epoch` and let Stripe
    finalize (and email) it automatically shortly before it is due.

    Returns:
        dict: invoice id, customer id and the finalization timestamp
    """
    customer = find_or_create_customer(email)
    stripe.InvoiceItem.create(
        customer=customer.id,
        amount=amount_cents,
        currency=currency,
        description=product_name,
        api_key=_api_key(),
    )
    invoice = stripe.Invoice.create(
        customer=customer.id,
        collection_method='send_invoice',
        due_date=due_date_epoch,
        auto_advance=True,
        pending_invoice_items_behavior='include',
        api_key=_api_key(),
    )
    finalize_time = finalize_at(due_date_epoch)
    stripe.Invoice.modify(invoice.id, automatically_finalizes_at=finalize_time, api_key=_api_key())
    return {'invoice_id': invoice.id, 'customer_id': customer.id, 'finalize_at': finalize_time}
