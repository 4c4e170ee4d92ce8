from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from dropstream.extensions import db
from dropstream.models.user import User


def auth_middleware(app):
    @app.before_request
    def load_current_user():
        g.current_user = None

        # No token means an anonymous request; a bad or expired one is rejected here
        if verify_jwt_in_request(optional=True) is None:
            return

        # A token for a deleted user authenticates nobody
        g.current_user = db.session.get(User, get_jwt_identity())
