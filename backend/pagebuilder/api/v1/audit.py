from flask import request, jsonify
from flask_jwt_extended import jwt_required
from pagebuilder.utils.decorators import roles_required
from pagebuilder.utils.pagination import paginate_cursor
from pagebuilder.models.audit_log import AuditLog
from pagebuilder.normalizers.audit import normalize_audit_log
from pagebuilder.normalizers.pagination import normalize_pagination
from . import v1_bp


@v1_bp.route("/audit", methods=["GET"])
@jwt_required()
@roles_required("admin")
def list_audit_logs():
    limit = min(request.args.get("limit", 20, type=int), 100)

    query = AuditLog.query

    # Optional filters
    if action := request.args.get("action"):
        query = query.filter(AuditLog.action == action)

    if entity_type := request.args.get("entity_type"):
        query = query.filter(AuditLog.entity_type == entity_type)

    if entity_id := request.args.get("entity_id"):
        query = query.filter(AuditLog.entity_id == entity_id)

    logs, cursor = paginate_cursor(
        query,
        model=AuditLog,
        cursor=request.args.get("cursor"),
        limit=limit,
    )

    return jsonify(normalize_pagination(logs, normalize_audit_log, cursor=cursor)), 200
