from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.web import login_required
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from .model import SessionContext
from .service import require_admin


def context_payload(ctx: SessionContext) -> dict:
    return {"userId": ctx.user_id, "role": ctx.role.value, "employeeId": ctx.employee_id}


def register(app: Flask, container: Container) -> None:
    def current_context() -> SessionContext:
        return container.directory.context_for(str(session["user_id"]))

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or {}
        ctx = container.auth_service.authenticate(str(data.get("email", "")), str(data.get("password", "")))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
        session["user_id"] = ctx.user_id

        return jsonify({"success": True, "user": context_payload(ctx)})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify({"success": True, "user": context_payload(current_context())})

    @app.route("/api/admin/employees", methods=["POST"], endpoint="admin_create_employee")
    @login_required
    def admin_create_employee():
        require_admin(current_context())

        data = request.get_json(silent=True) or {}
        result = container.provisioning_service.create_employee_user(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            department=data.get("department"),
            role=data.get("role"),
        )
        employee = result.employee
        return (
            jsonify(
                {
                    "success": True,
                    "uid": result.uid,
                    "employee": {
                        "userId": employee.user_id,
                        "employeeId": employee.employee_id,
                        "name": employee.name,
                        "email": employee.email,
                        "department": employee.department,
                        "role": employee.role.value,
                        "joinDate": employee.join_date.isoformat(),
                        "isActive": employee.is_active,
                    },
                }
            ),
            201,
        )
