"""
Routes package for the Relax Inn booking app
"""
# Export blueprints for registration in app.py
from routes.public import public_bp
from routes.otp import otp_bp
from routes.identity import identity_bp
from routes.payment import payment_bp
from routes.webhook import webhook_bp

__all__ = [
    'public_bp',
    'otp_bp',
    'identity_bp',
    'payment_bp',
    'webhook_bp',
]
