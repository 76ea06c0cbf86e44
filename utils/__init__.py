"""
Helpers shared by the routes: OTP tokens, mail, Stripe and door codes
"""
