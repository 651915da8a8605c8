"""
Central registry for all blueprints.
Import this from storefront/__init__.py → one function call registers everything.
"""
from flask import Flask, Blueprint, Response, jsonify
from storefront.utils.logging import get_logger
from typing import Any, List, Tuple, Optional

log = get_logger(__name__)

BLUEPRINTS: List[Tuple[Blueprint, Optional[str]]] = []


def register_blueprint(bp: Blueprint, *, url_prefix: Optional[str] = None) -> None:
    """Helper used inside each blueprint's __init__.py"""
    BLUEPRINTS.append((bp, url_prefix))


def init_blueprints(app: Flask) -> None:
    """Call this once from the app factory"""
    for bp, prefix in BLUEPRINTS:
        app.register_blueprint(bp, url_prefix=prefix)
        log.debug("Blueprint registered: %s → %s", bp.name, prefix or "/")
    log.info("All %d blueprints registered", len(BLUEPRINTS))


def no_content() -> Tuple[str, int]:
    return "", 204


def created(payload: Any) -> Tuple[Response, int]:
    return jsonify(payload), 201


from .auth import *
from .catalog import *
from .reviews import *
from .customers import *
from .orders import *
from .admin import *
