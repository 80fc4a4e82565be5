"""Deterministic OpenAPI document for the budget workflow API.

Covers auth, budget request listing/detail with caching headers, the decision and
office actions, and the reference lists. Status transitions are published from the
same graph the runtime validator uses, under `x-transitions`.
"""
from typing import Any, Dict, List
from .constants.roles import OFFICE_ROLES
from .constants.workflow import ALL_STATUSES, APPROVAL_CHAIN, DECISIONS, WORKFLOW_GRAPH

__all__ = ["build_openapi_spec"]


def caching_headers() -> Dict[str, Any]:
    return {
        "ETag": {"schema": {"type": "string"}},
        "Last-Modified": {"schema": {"type": "string"}},
        "X-Last-Modified-ISO": {"schema": {"type": "string"}},
    }


def _id_param(name: str = "request_id") -> Dict[str, Any]:
    return {"name": name, "in": "path", "required": True, "schema": {"type": "integer"}}


def _ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _json(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {"application/json": {"schema": schema}}


def _errors(*codes: str) -> Dict[str, Any]:
    return {c: {"$ref": f"#/components/responses/{_ERROR_RESPONSES[c]}"} for c in codes}


_ERROR_RESPONSES = {
    "400": "BadRequest",
    "401": "Unauthorized",
    "403": "Forbidden",
    "404": "NotFound",
    "409": "Conflict",
    "503": "Unavailable",
}


def _schemas() -> Dict[str, Any]:
    budget_request = {
        "type": "object",
        "properties": {
            "id": {"type": "integer"},
            "user_id": {"type": "integer"},
            "fund_id": {"type": "integer"},
            "title": {"type": "string"},
            "amount": {"type": "integer"},
            "reason": {"type": "string"},
            "organization": {"type": "string"},
            "payee": {"type": "string", "nullable": True},
            "line_items": {"type": "array", "items": _ref("LineItem")},
            "attachment_url": {"type": "string", "nullable": True},
            "status": {"type": "string", "enum": list(ALL_STATUSES)},
            "status_label": {"type": "string"},
            "required_role": {"type": "string", "nullable": True},
            "completed_step_index": {"type": "integer"},
            "can_act": {"type": "boolean"},
            "created_at": {"type": "string", "format": "date-time"},
            "updated_at": {"type": "string", "format": "date-time"},
        },
        "required": ["id", "title", "amount", "status"],
        "x-transitions": {k: sorted(v) for k, v in WORKFLOW_GRAPH.items()},
        "x-approval-chain": [{"status": s.status, "role": s.role} for s in APPROVAL_CHAIN],
    }
    return {
        "BudgetRequest": budget_request,
        "LineItem": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "quantity": {"type": "integer"},
                "unit_price": {"type": "integer"},
                "amount": {"type": "integer"},
            },
            "required": ["name", "quantity", "unit_price"],
        },
        "Decision": {
            "type": "object",
            "properties": {
                "action": {"type": "string", "enum": list(DECISIONS)},
                "comment": {"type": "string"},
            },
            "required": ["action"],
        },
        "ActResult": {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "id": {"type": "integer"},
                "previous_status": {"type": "string"},
                "status": {"type": "string"},
                "decision": {"type": "string"},
                "approval_id": {"type": "integer", "nullable": True},
                "warning": {"type": "string"},
            },
            "required": ["success", "id", "status"],
        },
        "Progress": {
            "type": "object",
            "properties": {
                "request_id": {"type": "integer"},
                "status": {"type": "string"},
                "completed_step_index": {"type": "integer"},
                "steps": {"type": "array", "items": {"type": "object"}},
            },
        },
        "Summary": {
            "type": "object",
            "properties": {
                "pending_count": {"type": "integer"},
                "pending_amount": {"type": "integer"},
                "used_amount": {"type": "integer"},
                "reserved_amount": {"type": "integer"},
                "departments": {"type": "array", "items": {"type": "string"}, "description": "Admin roles only"},
            },
            "required": ["pending_count", "pending_amount", "used_amount", "reserved_amount"],
        },
        "Fund": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "name": {"type": "string"},
                "year": {"type": "integer"},
                "description": {"type": "string", "nullable": True},
                "is_active": {"type": "boolean"},
            },
            "required": ["id", "name", "year"],
        },
        "Pagination": {
            "type": "object",
            "properties": {
                "total": {"type": "integer"},
                "limit": {"type": "integer"},
                "offset": {"type": "integer"},
                "returned": {"type": "integer"},
            },
            "required": ["total", "limit", "offset", "returned"],
        },
        "Error": {
            "type": "object",
            "properties": {
                "error": {
                    "type": "object",
                    "properties": {
                        "status": {"type": "integer"},
                        "title": {"type": "string"},
                        "detail": {"type": "string"},
                        "required_role": {"oneOf": [{"type": "string"}, {"type": "array", "items": {"type": "string"}}]},
                        "field_errors": {"type": "object", "additionalProperties": {"type": "string"}},
                    },
                }
            },
            "required": ["error"],
        },
    }


def _request_paths() -> Dict[str, Any]:
    list_params: List[Dict[str, Any]] = [
        {"$ref": "#/components/parameters/LimitParam"},
        {"$ref": "#/components/parameters/OffsetParam"},
        {"$ref": "#/components/parameters/RequestSortParam"},
        {"name": "status", "in": "query", "schema": {"type": "string", "enum": list(ALL_STATUSES)}},
        {"name": "organization", "in": "query", "schema": {"type": "string"}},
        {"name": "fund_id", "in": "query", "schema": {"type": "integer"}},
    ]
    list_body = _json({
        "type": "object",
        "properties": {"data": {"type": "array", "items": _ref("BudgetRequest")}, "pagination": _ref("Pagination")},
    })
    listing = {
        "get": {
            "summary": "List visible budget requests",
            "parameters": list_params,
            "responses": {
                "200": {"description": "OK", "headers": caching_headers(), "content": list_body},
                "304": {"description": "Not Modified"},
                **_errors("400"),
            },
        },
        "head": {
            "summary": "Budget request list validators",
            "responses": {"200": {"description": "Headers only", "headers": caching_headers()}, "304": {"description": "Not Modified"}},
        },
        "post": {
            "summary": "Submit a budget request",
            "requestBody": {"content": {"multipart/form-data": {"schema": {"type": "object"}}, **_json(_ref("BudgetRequest"))}},
            "responses": {"201": {"description": "Created", "content": _json(_ref("BudgetRequest"))}, **_errors("400", "503")},
        },
    }
    return {
        "/requests": listing,
        "/requests/pending": {
            "get": {
                "summary": "Requests awaiting the caller's role",
                "parameters": list_params[:3],
                "responses": {"200": {"description": "OK", "headers": caching_headers(), "content": list_body}},
            }
        },
        "/requests/summary": {
            "get": {
                "summary": "Dashboard totals over visible requests",
                "responses": {"200": {"description": "OK", "content": _json(_ref("Summary"))}, **_errors("401")},
            }
        },
        "/requests/{request_id}": {
            "get": {
                "summary": "Get budget request",
                "parameters": [_id_param()],
                "responses": {
                    "200": {"description": "OK", "headers": caching_headers(), "content": _json(_ref("BudgetRequest"))},
                    "304": {"description": "Not Modified"},
                    **_errors("403", "404"),
                },
            },
            "head": {
                "summary": "Budget request validators",
                "parameters": [_id_param()],
                "responses": {"200": {"description": "Headers only", "headers": caching_headers()}, **_errors("404")},
            },
        },
        "/requests/{request_id}/decision": {
            "post": {
                "summary": "Approve or reject the pending step",
                "parameters": [_id_param()],
                "requestBody": {"required": True, "content": _json(_ref("Decision"))},
                "responses": {
                    "200": {"description": "Transition applied", "content": _json(_ref("ActResult"))},
                    **_errors("400", "403", "404", "409", "503"),
                },
            }
        },
        "/requests/{request_id}/submit": {
            "post": {
                "summary": "Submit a saved draft for approval",
                "parameters": [_id_param()],
                "responses": {"200": {"description": "OK", "content": _json(_ref("BudgetRequest"))}, **_errors("400", "403", "404", "409")},
            }
        },
        "/requests/{request_id}/progress": {
            "get": {
                "summary": "Per-step approval progress",
                "parameters": [_id_param()],
                "responses": {"200": {"description": "OK", "content": _json(_ref("Progress"))}, **_errors("403", "404")},
            }
        },
        "/requests/{request_id}/approvals": {
            "get": {
                "summary": "Approval history",
                "parameters": [_id_param()],
                "responses": {"200": {"description": "OK"}, **_errors("403", "404")},
            }
        },
        "/requests/{request_id}/attachment": {
            "get": {
                "summary": "Download the estimate attachment",
                "parameters": [_id_param()],
                "responses": {"200": {"description": "File"}, **_errors("403", "404")},
            }
        },
    }


def _office_paths() -> Dict[str, Any]:
    office_roles = sorted(OFFICE_ROLES)
    return {
        "/office/queue": {
            "get": {"summary": "Approved and ready-for-payment requests", "x-required-roles": office_roles,
                    "responses": {"200": {"description": "OK", "headers": caching_headers()}, **_errors("403")}},
        },
        "/office/requests/{request_id}/ready": {
            "post": {"summary": "Mark cash prepared and notify the requester", "x-required-roles": office_roles,
                     "parameters": [_id_param()],
                     "responses": {"200": {"description": "OK"}, **_errors("400", "403", "404", "409")}},
        },
        "/office/requests/{request_id}/complete": {
            "post": {"summary": "Mark cash handed out", "x-required-roles": office_roles,
                     "parameters": [_id_param()],
                     "responses": {"200": {"description": "OK"}, **_errors("400", "403", "404", "409")}},
        },
    }


def build_openapi_spec() -> Dict[str, Any]:
    components: Dict[str, Any] = {
        "schemas": _schemas(),
        "responses": {
            name: {"description": name, "content": _json(_ref("Error"))} for name in _ERROR_RESPONSES.values()
        },
        "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        "parameters": {
            "LimitParam": {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 20}},
            "OffsetParam": {"name": "offset", "in": "query", "schema": {"type": "integer", "default": 0}},
            "RequestSortParam": {
                "name": "sort", "in": "query", "schema": {"type": "string"},
                "description": "Comma list of title,amount,status,organization,created_at,updated_at,id; prefix '-' for desc",
            },
        },
    }

    paths: Dict[str, Any] = {
        "/iam/auth/signup": {"post": {"summary": "Register a teacher account", "responses": {"201": {"description": "User created"}}}},
        "/iam/auth/login": {"post": {"summary": "Login", "responses": {"200": {"description": "JWT issued"}}}},
        "/iam/auth/me": {"get": {"summary": "Current user", "responses": {"200": {"description": "OK"}}}},
    }
    paths.update(_request_paths())
    paths.update(_office_paths())
    paths.update({
        "/funds": {
            "get": {"summary": "List funds", "responses": {"200": {"description": "OK", "headers": caching_headers()}}},
            "post": {"summary": "Create fund", "x-required-roles": sorted(OFFICE_ROLES),
                     "requestBody": {"content": _json(_ref("Fund"))},
                     "responses": {"201": {"description": "Created", "content": _json(_ref("Fund"))}, **_errors("400", "403")}},
        },
        "/item-categories": {
            "get": {"summary": "Previously used line items for a department",
                    "parameters": [{"name": "department", "in": "query", "required": True, "schema": {"type": "string"}},
                                   {"name": "year", "in": "query", "schema": {"type": "integer"}}],
                    "responses": {"200": {"description": "OK"}, **_errors("400")}},
        },
        "/workflow": {"get": {"summary": "Approval chain and status labels", "security": [],
                              "responses": {"200": {"description": "OK"}}}},
    })

    # Add operationIds & tags
    tag_desc: Dict[str, str] = {}
    for path, ops in paths.items():
        tag = path.split("/")[1].capitalize()
        for method, od in ops.items():
            rid = path.strip("/").replace("/", "_").replace("{", "").replace("}", "").replace("-", "_")
            od["operationId"] = f"auto_{method}_{rid}"
            od["tags"] = [tag]
        tag_desc[tag] = f"{tag} endpoints"

    return {
        "openapi": "3.0.3",
        "info": {"title": "School Budget Workflow API", "version": "0.1.0"},
        "paths": paths,
        "components": components,
        "security": [{"BearerAuth": []}],
        "tags": [{"name": n, "description": d} for n, d in sorted(tag_desc.items())],
    }
