"""
Glue between JSON request bodies and WTForms.

WTForms expects form-encoded strings, so JSON scalars are stringified and
JSON null is dropped: a null field is treated exactly like a missing one.
"""
from typing import Any, Dict, Mapping, Optional

from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField

from storefront.utils.exceptions import ValidationError

FALSE_VALUES = (False, "false", "False", "0", "off", "")


class JSONBooleanField(BooleanField):
    """BooleanField that understands JSON false and 'false' query strings."""

    def __init__(self, label=None, validators=None, **kwargs):
        kwargs.setdefault("false_values", FALSE_VALUES)
        super().__init__(label, validators, **kwargs)


def arg_flag(name: str, default: bool = False) -> bool:
    """Boolean query-string flag such as ?include_reviews=true"""
    value = request.args.get(name)
    if value is None:
        return default
    return value.strip() not in FALSE_VALUES


def json_payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def json_formdata(payload: Optional[Mapping[str, Any]] = None) -> MultiDict:
    payload = json_payload() if payload is None else payload
    data = MultiDict()
    for key, value in payload.items():
        values = value if isinstance(value, list) else [value]
        for item in values:
            if item is None:
                continue
            data.add(key, item if isinstance(item, (dict, list)) else str(item))
    return data


def validate_or_raise(form: FlaskForm) -> FlaskForm:
    if not form.validate():
        raise ValidationError("Invalid input", **form.errors)
    return form


def submitted(form: FlaskForm) -> Dict[str, Any]:
    """Data of the fields that were actually sent with a non-null value."""
    sent = getattr(form, "sent_keys", set())
    return {name: field.data for name, field in form._fields.items() if name in sent}


def bind(form_class, formdata: Optional[MultiDict] = None) -> FlaskForm:
    """Build, validate and return `form_class` over the JSON body (or given formdata)."""
    formdata = json_formdata() if formdata is None else formdata
    form = form_class(formdata=formdata)
    form.sent_keys = set(formdata.keys())
    return validate_or_raise(form)
