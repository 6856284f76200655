from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from library_app.schemas import LoginIn, RegisterIn, parse
from library_app.services.auth_service import AuthService

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register")
def register():
    data = parse(RegisterIn, request.get_json(silent=True))

    # rol dışarıdan alınmaz, admin'i CLI oluşturur
    user = AuthService.register(username=data.username, email=data.email, password=data.password)
    return jsonify({"success": True, "message": "User registered successfully", "user": user.to_dict()}), 201


@auth_bp.post("/login")
def login():
    data = parse(LoginIn, request.get_json(silent=True))
    token, user = AuthService.login(data.email, data.password)
    return jsonify({
        "success": True,
        "message": "Login successful",
        "token": token,
        "user": {"id": user.id, "username": user.username, "email": user.email, "role": user.role},
    })


@auth_bp.get("/verify")
@jwt_required()
def verify():
    user_id, _role = AuthService.current_identity()
    user = AuthService.get_profile(user_id)
    return jsonify({"success": True, "user": user.to_dict()})


@auth_bp.post("/logout")
@jwt_required()
def logout():
    # stateless JWT: token istemci tarafında silinir
    return jsonify({"success": True, "message": "Logout successful. Please remove the token from client storage."})
