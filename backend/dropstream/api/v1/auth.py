from flask import jsonify, g
from flask_jwt_extended import create_access_token

from dropstream.errors import Unauthorized, ValidationError
from dropstream.models.user import User
from dropstream.normalizers.user import normalize_user
from dropstream.utils.decorators import login_required
from dropstream.utils.request_data import json_body
from . import v1_bp


@v1_bp.route("/auth/login", methods=["POST"])
def login():
    data = json_body()

    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        raise ValidationError("Email and password required")

    user = User.query.filter_by(email=email).first()

    if not user or not user.check_password(password):
        raise Unauthorized("Invalid credentials")

    access_token = create_access_token(
        identity=user.id,
        additional_claims={"role": user.platform_role}
    )

    return jsonify({
        "access_token": access_token,
        "user": normalize_user(user, admin=True)
    }), 200


@v1_bp.route("/auth/me", methods=["GET"])
@login_required
def me():
    return jsonify(normalize_user(g.current_user, admin=True))
