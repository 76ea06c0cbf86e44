"""
JSON request body helpers shared by the API blueprints.
"""
from flask import request


def json_body():
    """Request JSON as a dict; a missing, invalid or non-object body counts as empty."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def text_field(data, name):
    value = data.get(name)
    return str(value).strip() if value is not None else ''
