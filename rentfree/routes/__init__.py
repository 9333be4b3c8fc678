"""Flask Blueprint registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .api import create_blueprint

if TYPE_CHECKING:
    from flask import Flask

    from ..bootstrap import RentfreeContext


def register_blueprints(app: Flask, ctx: RentfreeContext) -> None:
    """Register every API blueprint that is not yet registered."""
    if "rentfree_api" not in app.blueprints:
        app.register_blueprint(create_blueprint(ctx.directory, ctx.names))
