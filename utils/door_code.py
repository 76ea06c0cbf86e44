"""
Demo door codes issued after a successful payment.
"""
import secrets
from datetime import datetime, timedelta

CHECK_IN_HOUR = 15
CHECK_OUT_HOUR = 11
STAY_DAYS = {'week': 7, 'month': 30}


def generate_door_code() -> str:
    """6-digit code without a leading zero, like a keypad PIN."""
    return str(100000 + secrets.randbelow(900000))


def stay_window(interval, start=None):
    """
    Return (check_in, check_out) for a plan interval ('week' or 'month').
    Check-in is 3pm on the start day; check-out 11am after 7 or 30 days.
    """
    start = start or datetime.now()
    check_in = start.replace(hour=CHECK_IN_HOUR, minute=0, second=0, microsecond=0)
    days = STAY_DAYS['month'] if interval == 'month' else STAY_DAYS['week']
    check_out = (check_in + timedelta(days=days)).replace(hour=CHECK_OUT_HOUR)
    return check_in, check_out
