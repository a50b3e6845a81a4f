from flask import Blueprint, request, jsonify, session
from flask_login import login_user, logout_user, login_required, current_user
from services.auth_service import authenticate_user, create_token

# Define the blueprint
auth_bp = Blueprint("auth", __name__)

# =========================================================
# LOGIN ROUTE
# =========================================================
@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or request.form
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""

    # 1. Basic Validation
    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    # 2. Authenticate User
    user = authenticate_user(email, password)

    if not user:
        return jsonify({"error": "Invalid email or password"}), 401

    if user.role is None:
        return jsonify({"error": "Your account has no role assigned"}), 403

    # 3. Session login for browser clients, bearer token for API clients
    login_user(user)

    return jsonify({
        "access_token": create_token(user),
        "token_type": "bearer",
        "user": user.to_dict()
    })

# =========================================================
# LOGOUT ROUTE
# =========================================================
@auth_bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    session.clear()
    return jsonify({"status": "success"})


@auth_bp.route("/me")
@login_required
def me():
    return jsonify(current_user.to_dict())
