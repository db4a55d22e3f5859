"""ProcessingRule repository for database operations."""

import json
from typing import Optional, List
from uuid import uuid4

from core.extraction.rules import Rule
from database.connection import get_session
from models.rule import ProcessingRule


class RuleRepository:
    """Repository for ProcessingRule CRUD operations."""

    def create_rule(
        self,
        name: str,
        pattern: str,
        fields: list,
        output_template: str = "",
        required_fields: Optional[list] = None,
        is_active: bool = True,
    ) -> ProcessingRule:
        """Create a new rule. Raises RuleFormatError if the rule does not decode."""
        Rule.from_dict({
            "name": name,
            "pattern": pattern,
            "fields": fields,
            "output_template": output_template,
            "required_fields": required_fields or [],
        })

        session = get_session()
        try:
            rule = ProcessingRule(
                id=str(uuid4()),
                name=name,
                pattern=pattern,
                fields_json=json.dumps(fields),
                output_template=output_template or "",
                required_fields_json=json.dumps(required_fields or []),
                is_active=is_active,
            )
            session.add(rule)
            session.commit()
            session.refresh(rule)
            return rule
        except Exception:
            session.rollback()
            raise

    def get_rule(self, rule_id: str) -> Optional[ProcessingRule]:
        """Get a rule by ID."""
        session = get_session()
        return session.query(ProcessingRule).filter(ProcessingRule.id == rule_id).first()

    def list_rules(self, active_only: bool = False) -> List[ProcessingRule]:
        """List rules in creation order."""
        session = get_session()
        query = session.query(ProcessingRule)

        if active_only:
            query = query.filter(ProcessingRule.is_active.is_(True))

        return query.order_by(ProcessingRule.created_at).all()

    def load_rules(self) -> List[Rule]:
        """Decode every stored rule for the engine (raises RuleFormatError)."""
        return [r.to_rule() for r in self.list_rules()]

    def count_rules(self) -> int:
        """Count stored rules."""
        session = get_session()
        return session.query(ProcessingRule).count()

    def update_rule(self, rule_id: str, **kwargs) -> Optional[ProcessingRule]:
        """Update rule fields. Raises RuleFormatError if the result does not decode."""
        session = get_session()
        try:
            rule = session.query(ProcessingRule).filter(ProcessingRule.id == rule_id).first()
            if not rule:
                return None

            for key, value in kwargs.items():
                if key == "fields":
                    rule.fields = value
                elif key == "required_fields":
                    rule.required_fields = value
                elif hasattr(rule, key) and key not in ("id", "created_at"):
                    setattr(rule, key, value)

            rule.to_rule()

            session.commit()
            session.refresh(rule)
            return rule
        except Exception:
            session.rollback()
            raise

    def delete_rule(self, rule_id: str) -> bool:
        """Delete a rule."""
        session = get_session()
        try:
            rule = session.query(ProcessingRule).filter(ProcessingRule.id == rule_id).first()
            if rule:
                session.delete(rule)
                session.commit()
                return True
            return False
        except Exception:
            session.rollback()
            raise
