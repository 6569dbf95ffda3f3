"""
Template Store
CRUD over lease templates plus the "exactly one default" rule.

Setting is_default on create/update clears the flag on every other template
first (and flushes that before the new flag is written, so the partial
unique index on is_default never sees two defaults).
"""
import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import update
from sqlalchemy.orm import Session

from leasedesk.core.clock import Clock, SystemClock
from leasedesk.core.config import Settings, get_settings
from leasedesk.core.result import ErrorKind, ServiceResult
from leasedesk.models.lease import LeaseTemplate
from leasedesk.repositories.base import SqlAlchemyRepository
from leasedesk.schemas.lease import LeaseTemplateCreate, LeaseTemplateUpdate
from leasedesk.services.base import service_operation
from leasedesk.services.default_template import (
    DEFAULT_TEMPLATE_DESCRIPTION,
    DEFAULT_TEMPLATE_HTML,
    DEFAULT_TEMPLATE_NAME,
    TEMPLATE_VARIABLES,
    template_variables_json,
)

logger = logging.getLogger(__name__)


class LeaseTemplateService:

    def __init__(self, db: Session, settings: Optional[Settings] = None, clock: Optional[Clock] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock()
        self.templates = SqlAlchemyRepository(db, LeaseTemplate)

    # ─────────────────────── Queries ───────────────────────

    @service_operation("retrieving lease templates")
    def list_templates(self) -> ServiceResult[List[LeaseTemplate]]:
        """Active templates, default first then by name."""
        rows = self.templates.query(
            LeaseTemplate.is_active.is_(True),
            order_by=(LeaseTemplate.is_default.desc(), LeaseTemplate.name),
        )
        return ServiceResult.ok(rows)

    @service_operation("retrieving lease template")
    def get_template(self, template_id: int) -> ServiceResult[LeaseTemplate]:
        template = self.templates.get(template_id)
        if template is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Lease template not found")
        return ServiceResult.ok(template)

    @service_operation("retrieving default template")
    def get_default_template(self) -> ServiceResult[LeaseTemplate]:
        """Current default; the built-in template is created on first use."""
        return ServiceResult.ok(self.resolve_default())

    def template_variables(self) -> Dict[str, str]:
        return dict(TEMPLATE_VARIABLES)

    # ─────────────────────── Commands ───────────────────────

    @service_operation("creating lease template")
    def create_template(
        self, payload: Union[LeaseTemplateCreate, Dict[str, Any]]
    ) -> ServiceResult[LeaseTemplate]:
        data = payload if isinstance(payload, LeaseTemplateCreate) else LeaseTemplateCreate.model_validate(payload)

        if data.is_default:
            self._clear_default()

        now = self.clock.now_utc()
        template = LeaseTemplate(
            name=data.name,
            html_content=data.html_content,
            description=data.description,
            is_active=data.is_active,
            is_default=data.is_default,
            template_variables=data.template_variables or template_variables_json(),
            created_at=now,
            updated_at=now,
        )
        self.templates.add(template)
        logger.info(f"[LEASE][TEMPLATE] Created template {template.id} '{template.name}' (default={template.is_default})")
        return ServiceResult.ok(template)

    @service_operation("updating lease template")
    def update_template(
        self, template_id: int, payload: Union[LeaseTemplateUpdate, Dict[str, Any]]
    ) -> ServiceResult[LeaseTemplate]:
        data = payload if isinstance(payload, LeaseTemplateUpdate) else LeaseTemplateUpdate.model_validate(payload)

        template = self.templates.get(template_id)
        if template is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Lease template not found")

        if data.is_default and not template.is_default:
            self._clear_default(exclude_id=template.id)

        template.name = data.name
        template.html_content = data.html_content
        template.description = data.description
        template.is_active = data.is_active
        template.is_default = data.is_default
        if data.template_variables is not None:
            template.template_variables = data.template_variables
        template.updated_at = self.clock.now_utc()
        self.templates.update(template)

        logger.info(f"[LEASE][TEMPLATE] Updated template {template.id} (default={template.is_default})")
        return ServiceResult.ok(template)

    @service_operation("deleting lease template")
    def delete_template(self, template_id: int) -> ServiceResult[None]:
        template = self.templates.get(template_id)
        if template is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Lease template not found")
        self.templates.delete(template)
        logger.info(f"[LEASE][TEMPLATE] Deleted template {template_id}")
        return ServiceResult.ok()

    # ─────────────────────── Internals ───────────────────────

    def resolve_default(self) -> LeaseTemplate:
        """
        Active default template, creating the built-in one when none exists.
        Runs inside the caller's transaction; the caller commits.
        """
        template = self.templates.first(
            LeaseTemplate.is_default.is_(True),
            LeaseTemplate.is_active.is_(True),
        )
        if template is not None:
            return template

        # A default row may exist but be inactive; it must lose the flag first
        self._clear_default()
        now = self.clock.now_utc()
        template = LeaseTemplate(
            name=DEFAULT_TEMPLATE_NAME,
            html_content=DEFAULT_TEMPLATE_HTML,
            description=DEFAULT_TEMPLATE_DESCRIPTION,
            is_active=True,
            is_default=True,
            template_variables=template_variables_json(),
            created_at=now,
            updated_at=now,
        )
        self.templates.add(template)
        logger.info(f"[LEASE][TEMPLATE] Created built-in default template {template.id}")
        return template

    def _clear_default(self, exclude_id: Optional[int] = None) -> None:
        stmt = update(LeaseTemplate).where(LeaseTemplate.is_default.is_(True))
        if exclude_id is not None:
            stmt = stmt.where(LeaseTemplate.id != exclude_id)
        self.db.execute(
            stmt.values(is_default=False, updated_at=self.clock.now_utc()),
        )
        self.db.flush()

