"""Rules API endpoints for managing and trying out extraction rules."""

from functools import wraps
from flask import Blueprint, request, jsonify, g

from api.middleware.exceptions import NotFoundError, ValidationError
from core.extraction.engine import ExtractionEngine
from core.extraction.rules import Rule
from database.repositories.rule_repository import RuleRepository

rules_bp = Blueprint("rules", __name__)
rule_repo = RuleRepository()
engine = ExtractionEngine()

RULE_KEYS = ("name", "pattern", "fields", "output_template", "required_fields", "is_active")


def require_rule(f):
    """Decorator that loads the rule into flask.g or raises NotFoundError."""
    @wraps(f)
    def decorated(rule_id, *args, **kwargs):
        rule = rule_repo.get_rule(rule_id)
        if not rule:
            raise NotFoundError("Rule", rule_id)
        g.rule = rule
        return f(rule_id, *args, **kwargs)
    return decorated


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _rule_payload(rule: Rule) -> dict:
    return {"warnings": [
        f"'{name}' is written by more than one field or special value"
        for name in rule.special_value_collisions()
    ]}


@rules_bp.route("", methods=["GET"])
def list_rules():
    """List stored rules."""
    active_only = request.args.get("active_only", "false").lower() == "true"
    rules = rule_repo.list_rules(active_only=active_only)
    return jsonify({"rules": [r.to_dict() for r in rules], "total": len(rules)})


@rules_bp.route("", methods=["POST"])
def create_rule():
    """Create a rule. The body is rule JSON; it must decode."""
    data = _json_body()
    for key in ("name", "pattern", "fields"):
        if not data.get(key):
            raise ValidationError(f"'{key}' is required", {"field": key})

    rule = rule_repo.create_rule(
        name=data["name"],
        pattern=data["pattern"],
        fields=data["fields"],
        output_template=data.get("output_template") or data.get("outputTemplate") or "",
        required_fields=data.get("required_fields") or data.get("requiredFields") or [],
        is_active=data.get("is_active", True),
    )
    return jsonify({"rule": rule.to_dict(), **_rule_payload(rule.to_rule())}), 201


@rules_bp.route("/<rule_id>", methods=["GET"])
@require_rule
def get_rule(rule_id: str):
    """Get one rule."""
    return jsonify({"rule": g.rule.to_dict()})


@rules_bp.route("/<rule_id>", methods=["PUT"])
@require_rule
def update_rule(rule_id: str):
    """Update a rule; the updated rule must still decode."""
    data = _json_body()
    updates = {key: data[key] for key in RULE_KEYS if key in data}
    rule = rule_repo.update_rule(rule_id, **updates)
    return jsonify({"rule": rule.to_dict(), **_rule_payload(rule.to_rule())})


@rules_bp.route("/<rule_id>", methods=["DELETE"])
@require_rule
def delete_rule(rule_id: str):
    """Delete a rule."""
    rule_repo.delete_rule(rule_id)
    return jsonify({"message": "Rule deleted"})


@rules_bp.route("/test", methods=["POST"])
def test_rule():
    """
    Run a rule against a single message without storing anything.

    Body: {"rule": {...rule JSON...}, "email": {...message...}}
    """
    data = _json_body()
    if not isinstance(data.get("rule"), dict):
        raise ValidationError("'rule' must be a rule object", {"field": "rule"})
    if not isinstance(data.get("email"), dict):
        raise ValidationError("'email' must be a message object", {"field": "email"})

    rule = Rule.from_dict(data["rule"])
    outcome = engine.process(rule, data["email"])
    return jsonify({**outcome, **_rule_payload(rule)})
