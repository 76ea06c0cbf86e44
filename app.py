"""
Main Flask application entry point for the Relax Inn booking demo
"""
import logging
import os

from flask import Flask, jsonify, request
from config import Config
from utils.mail import mail


def create_app(config_class=Config):
    """Application factory pattern. No database: OTP state lives in signed tokens."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger("utils").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    mail.init_app(app)

    @app.errorhandler(500)
    def handle_500_error(e):
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "message": "Internal server error. Please try again later."}), 500
        return e

    # Register blueprints
    from routes import public_bp, otp_bp, identity_bp, payment_bp, webhook_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(otp_bp)
    app.register_blueprint(identity_bp)
    app.register_blueprint(payment_bp)
    app.register_blueprint(webhook_bp)

    if not app.config.get("MAIL_SERVER"):
        app.logger.warning("MAIL_SERVER not set; verification codes will not be emailed")
    if not app.config.get("STRIPE_SECRET_KEY"):
        app.logger.warning("STRIPE_SECRET_KEY not set; checkout and identity endpoints will fail")

    return app


# WSGI entry point (Railway/Render): gunicorn -c gunicorn_config.py app:app
app = create_app()
application = app

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "false").lower() in ("true", "1"))
