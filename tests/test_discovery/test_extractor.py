"""Tests for adminlens.discovery.extractor -- the discovery pipeline."""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

import pytest

from adminlens.discovery.extractor import parse_openapi_spec
from adminlens.discovery.resolver import UNRESOLVED_REASON_KEY, is_unresolved
from adminlens.discovery.tree import find_resource, iter_resources
from adminlens.exceptions import ContractError
from adminlens.models import EngineConfig, HTTPMethod, OperationType, ParsedSpec


BASE_URL = "http://localhost:3000/api/v1/admin"
PARSED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _op(parsed: ParsedSpec, op_id: str):
    return next(op for op in parsed.all_operations if op.id == op_id)


# ---------------------------------------------------------------------------
# Minimal users description
# ---------------------------------------------------------------------------


class TestUsersDiscovery:
    def test_six_operations(self, users_spec: ParsedSpec) -> None:
        assert len(users_spec.all_operations) == 6

    def test_admin_prefix(self, users_spec: ParsedSpec) -> None:
        assert users_spec.admin_prefix == "/api/v1/admin"

    def test_users_resource(self, users_spec: ParsedSpec) -> None:
        users = find_resource(users_spec.resources, "users")
        assert users is not None
        assert users.requires_parent_id is False
        assert {op.operation_type for op in users.operations} == {
            OperationType.LIST,
            OperationType.CREATE,
            OperationType.DETAIL,
            OperationType.UPDATE,
            OperationType.DELETE,
        }

    def test_credits_is_child_of_users(self, users_spec: ParsedSpec) -> None:
        users = find_resource(users_spec.resources, "users")
        assert [c.key for c in users.children] == ["users.credits"]
        credits = users.children[0]
        assert credits.requires_parent_id is True
        assert credits.parent_key == "users"

    def test_credits_operation(self, users_spec: ParsedSpec) -> None:
        op = _op(users_spec, "GET:/users/{userId}/credits")
        assert op.resource_key == "users.credits"
        assert op.operation_type == OperationType.SUB_LIST
        assert op.path_parameters == ["userId"]

    def test_operation_ids_follow_method_and_path(self, users_spec: ParsedSpec) -> None:
        assert [op.id for op in users_spec.all_operations] == [
            "GET:/users",
            "POST:/users",
            "GET:/users/{userId}",
            "PATCH:/users/{userId}",
            "DELETE:/users/{userId}",
            "GET:/users/{userId}/credits",
        ]

    def test_every_operation_names_a_resource(self, users_spec: ParsedSpec) -> None:
        keys = {r.key for r in iter_resources(users_spec.resources)}
        assert all(op.resource_key in keys for op in users_spec.all_operations)

    def test_deterministic(self, users_api_raw: dict[str, Any]) -> None:
        first = parse_openapi_spec(users_api_raw, BASE_URL, "users", parsed_at=PARSED_AT)
        second = parse_openapi_spec(users_api_raw, BASE_URL, "users", parsed_at=PARSED_AT)
        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_does_not_mutate_input(self, users_api_raw: dict[str, Any]) -> None:
        before = copy.deepcopy(users_api_raw)
        parse_openapi_spec(users_api_raw, BASE_URL, "users")
        assert users_api_raw == before

    def test_parsed_at_defaults_to_now(self, users_api_raw: dict[str, Any]) -> None:
        parsed = parse_openapi_spec(users_api_raw, BASE_URL, "users")
        assert parsed.parsed_at.tzinfo is not None

    def test_metadata(self, users_spec: ParsedSpec) -> None:
        assert users_spec.product_id == "users"
        assert users_spec.spec_version == "3.1.0"
        assert users_spec.api_title == "Users"
        assert users_spec.api_version == "1.0.0"


# ---------------------------------------------------------------------------
# Full admin description
# ---------------------------------------------------------------------------


class TestAdminDiscovery:
    def test_foreign_paths_dropped(self, admin_spec: ParsedSpec) -> None:
        paths = {op.path_template for op in admin_spec.all_operations}
        assert "/api/v1/public/ping" not in paths
        assert not any("administrators" in p for p in paths)
        assert len(admin_spec.all_operations) == 12

    def test_non_method_keys_skipped(self, admin_spec: ParsedSpec) -> None:
        methods = [
            op.http_method
            for op in admin_spec.all_operations
            if op.path_template == "/users/{userId}"
        ]
        assert methods == [HTTPMethod.GET, HTTPMethod.PATCH, HTTPMethod.DELETE]

    def test_response_schema_resolved_through_envelope(self, admin_spec: ParsedSpec) -> None:
        schema = _op(admin_spec, "GET:/users").response_schema
        user = schema["properties"]["data"]["items"]
        assert user["properties"]["createdAt"]["format"] == "date-time"

    def test_created_response_used(self, admin_spec: ParsedSpec) -> None:
        schema = _op(admin_spec, "POST:/users").response_schema
        assert schema["type"] == "object"
        assert "email" in schema["properties"]

    def test_request_body_schema(self, admin_spec: ParsedSpec) -> None:
        body = _op(admin_spec, "POST:/users").request_body_schema
        assert body == {"type": "object", "properties": {"email": {"type": "string"}}}

    def test_missing_schemas_are_none(self, admin_spec: ParsedSpec) -> None:
        op = _op(admin_spec, "DELETE:/users/{userId}")
        assert op.request_body_schema is None
        assert op.response_schema is None

    def test_json_variant_content_type(self, admin_spec: ParsedSpec) -> None:
        schema = _op(admin_spec, "GET:/events").response_schema
        assert is_unresolved(schema)
        assert schema[UNRESOLVED_REASON_KEY] == "missing"

    def test_singleton_update(self, admin_spec: ParsedSpec) -> None:
        op = _op(admin_spec, "PATCH:/credits/config")
        assert op.operation_type == OperationType.UPDATE
        assert op.resource_key == "credits.config"

    def test_roots(self, admin_spec: ParsedSpec) -> None:
        assert [r.key for r in admin_spec.resources] == [
            "credits",
            "events",
            "health",
            "stats",
            "users",
        ]

    def test_registry_resolved(self, admin_spec: ParsedSpec) -> None:
        grant = admin_spec.schemas["CreditGrant"]
        assert grant["properties"]["grantedBy"]["type"] == "object"
        node_items = admin_spec.schemas["Node"]["properties"]["children"]["items"]
        assert node_items[UNRESOLVED_REASON_KEY] == "circular"

    def test_tags_and_summary(self, admin_spec: ParsedSpec) -> None:
        op = _op(admin_spec, "GET:/users")
        assert op.tags == ["users"]
        assert op.summary == "List users"

    def test_max_depth_from_config(self, admin_api_raw: dict[str, Any]) -> None:
        parsed = parse_openapi_spec(
            admin_api_raw, BASE_URL, "acme", config=EngineConfig(max_schema_depth=0)
        )
        schema = _op(parsed, "GET:/users").response_schema
        assert schema["properties"]["data"]["items"][UNRESOLVED_REASON_KEY] == "max-depth"


# ---------------------------------------------------------------------------
# Degenerate input
# ---------------------------------------------------------------------------


class TestDegenerateInput:
    def test_unusable_base_url_admits_nothing(self, admin_api_raw: dict[str, Any]) -> None:
        parsed = parse_openapi_spec(admin_api_raw, "nonsense", "acme")
        assert parsed.admin_prefix == ""
        assert parsed.all_operations == []
        assert parsed.resources == []

    def test_missing_paths(self) -> None:
        parsed = parse_openapi_spec({"openapi": "3.0.0"}, BASE_URL, "empty")
        assert parsed.all_operations == []
        assert parsed.api_title == "Untitled API"

    def test_non_mapping_path_item_skipped(self) -> None:
        raw = {"paths": {"/api/v1/admin/users": "oops"}}
        assert parse_openapi_spec(raw, BASE_URL, "x").all_operations == []

    def test_prefix_variants_keep_every_method(self) -> None:
        raw = {
            "paths": {
                "/api/v1/admin": {"get": {"summary": "Overview"}},
                "/api/v1/admin/": {"get": {"summary": "Shadowed"}, "post": {"summary": "Create"}},
            }
        }
        parsed = parse_openapi_spec(raw, BASE_URL, "x")
        ops = [(op.id, op.summary) for op in parsed.all_operations]
        assert ops == [("GET:/", "Overview"), ("POST:/", "Create")]

    def test_integer_status_keys(self) -> None:
        raw = {
            "paths": {
                "/api/v1/admin/stats": {
                    "get": {
                        "responses": {
                            200: {
                                "content": {"application/json": {"schema": {"type": "object"}}}
                            }
                        }
                    }
                }
            }
        }
        parsed = parse_openapi_spec(raw, BASE_URL, "x")
        assert parsed.all_operations[0].response_schema == {"type": "object"}

    @pytest.mark.parametrize("bad", [None, [], "openapi: 3.0.0"])
    def test_rejects_non_mapping(self, bad: Any) -> None:
        with pytest.raises(ContractError):
            parse_openapi_spec(bad, BASE_URL, "x")
