"""Step template registry use case."""

from typing import Any, Optional

from app.application.dtos.step_template import StepTemplateCreate, StepTemplatePatch
from app.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from app.application.use_cases.base import (
    LoggerFunc,
    TimelineUseCase,
    load_template,
    parse_role,
)
from app.domain.entities.step_template import StepTemplate
from app.domain.errors import (
    DuplicateOrderIndexError,
    InvalidTransitionError,
    PermissionDeniedError,
    ValidationFailedError,
)
from app.domain.services.progression import order_templates
from app.domain.value_objects.user_role import UserRole

ENTITY_TYPE = "step_master"


class StepTemplateRegistry(TimelineUseCase):
    """Admin-only management of the ordered step templates."""

    component = "registry"

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        logger: Optional[LoggerFunc] = None,
        retries: int = 1,
        order_index_gap: int = 1000,
    ) -> None:
        """
        Initialize registry.

        Args:
            uow_factory: Creates a unit of work per transaction
            logger: Optional logger function (component, event, **kwargs)
            retries: Retries allowed after a write conflict
            order_index_gap: Spacing between appended or renumbered order indices
        """
        super().__init__(uow_factory, logger=logger, retries=retries)
        self._gap = order_index_gap

    def _require_admin(self, role: "UserRole | str", action: str) -> None:
        if parse_role(role, action) != UserRole.ADMIN:
            raise PermissionDeniedError(str(role), action)

    @staticmethod
    def _check_free_index(
        templates: list[StepTemplate], order_index: int, template_id: Optional[str] = None
    ) -> None:
        for other in templates:
            if other.is_active and other.id != template_id and other.order_index == order_index:
                raise DuplicateOrderIndexError(order_index, existing_id=other.id)

    async def _renumber(self, uow: UnitOfWork, ordered: list[StepTemplate]) -> None:
        """
        Give the templates evenly spaced indices in the given order.

        Indices are first parked above both every existing index and the
        final range so that no intermediate write collides with another
        active template.
        """
        everything = await uow.templates.list(include_inactive=True)
        highest = max((t.order_index for t in everything), default=0)
        offset = max(highest, len(ordered) * self._gap) + 1
        for position, template in enumerate(ordered):
            template.order_index = offset + position
            await uow.templates.update(template)
        for position, template in enumerate(ordered, start=1):
            template.order_index = position * self._gap
            template.touch()
            await uow.templates.update(template)

    async def create_template(
        self, user_id: str, role: "UserRole | str", config: StepTemplateCreate
    ) -> StepTemplate:
        """
        Create a step template.

        Without an explicit order index the template is appended after the
        highest existing index.

        Args:
            user_id: Acting user
            role: Acting role (admin only)
            config: Template configuration

        Returns:
            Created template

        Raises:
            PermissionDeniedError: If the caller is not an admin
            DuplicateOrderIndexError: If another active template has the index
            ValidationFailedError: If the configuration is invalid
        """
        self._require_admin(role, "create_step_template")

        async def work(uow: UnitOfWork) -> StepTemplate:
            existing = await uow.templates.list(include_inactive=True)
            if config.order_index is None:
                order_index = max((t.order_index for t in existing), default=0) + self._gap
            else:
                order_index = config.order_index
                self._check_free_index(existing, order_index)

            template = StepTemplate(
                name=config.name.strip(),
                order_index=order_index,
                allowed_roles=frozenset(config.allowed_roles),
                remarks_required=config.remarks_required,
                attachments_allowed=config.attachments_allowed,
                customer_upload=config.customer_upload,
            )
            await uow.templates.add(template)
            await uow.activity_log.record(
                user_id,
                "create_step_template",
                ENTITY_TYPE,
                entity_id=template.id,
                new_value=template.snapshot(),
            )
            return template

        template = await self._transaction(work)
        self._log("template_created", template_id=template.id, order_index=template.order_index)
        return template

    async def update_template(
        self,
        user_id: str,
        role: "UserRole | str",
        template_id: str,
        patch: StepTemplatePatch,
    ) -> StepTemplate:
        """
        Apply a partial update to a step template.

        Args:
            user_id: Acting user
            role: Acting role (admin only)
            template_id: Template to update
            patch: Fields to change

        Returns:
            Updated template
        """
        self._require_admin(role, "update_step_template")
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)

        async def work(uow: UnitOfWork) -> StepTemplate:
            template = await load_template(uow, template_id)
            old_value = template.snapshot()

            if "order_index" in changes:
                others = await uow.templates.list(include_inactive=True)
                self._check_free_index(others, changes["order_index"], template_id=template.id)
                template.order_index = changes["order_index"]
            if "name" in changes:
                if not changes["name"].strip():
                    raise ValidationFailedError("step name must not be empty")
                template.name = changes["name"].strip()
            if "allowed_roles" in changes:
                template.assign_roles(changes["allowed_roles"])
            for flag in ("remarks_required", "attachments_allowed", "customer_upload"):
                if flag in changes:
                    setattr(template, flag, changes[flag])

            template.touch()
            await uow.templates.update(template)
            await uow.activity_log.record(
                user_id,
                "update_step_template",
                ENTITY_TYPE,
                entity_id=template.id,
                old_value=old_value,
                new_value=template.snapshot(),
            )
            return template

        template = await self._transaction(work)
        self._log("template_updated", template_id=template.id, fields=sorted(changes))
        return template

    async def reorder(
        self, user_id: str, role: "UserRole | str", template_id: str, new_order_index: int
    ) -> StepTemplate:
        """
        Move one template to a new order index.

        Raises:
            DuplicateOrderIndexError: If another active template already has the index
        """
        return await self.update_template(
            user_id, role, template_id, StepTemplatePatch(order_index=new_order_index)
        )

    async def reorder_templates(
        self, user_id: str, role: "UserRole | str", ordered_ids: list[str]
    ) -> list[StepTemplate]:
        """
        Replace the order of all active templates.

        Args:
            user_id: Acting user
            role: Acting role (admin only)
            ordered_ids: Every active template id, in the new order

        Returns:
            Templates in their new order

        Raises:
            ValidationFailedError: If the ids are not exactly the active templates
        """
        self._require_admin(role, "reorder_step_templates")
        if len(set(ordered_ids)) != len(ordered_ids):
            raise ValidationFailedError("step ids must not repeat")

        async def work(uow: UnitOfWork) -> list[StepTemplate]:
            active = {t.id: t for t in await uow.templates.list()}
            if set(active) != set(ordered_ids):
                raise ValidationFailedError(
                    "step ids must list every active step exactly once",
                    missing=sorted(set(active) - set(ordered_ids)),
                    unknown=sorted(set(ordered_ids) - set(active)),
                )
            old_order = {t.id: t.order_index for t in active.values()}
            ordered = [active[template_id] for template_id in ordered_ids]
            await self._renumber(uow, ordered)
            await uow.activity_log.record(
                user_id,
                "reorder_step_templates",
                ENTITY_TYPE,
                old_value={"order": old_order},
                new_value={"order": {t.id: t.order_index for t in ordered}},
            )
            return ordered

        ordered = await self._transaction(work)
        self._log("templates_reordered", count=len(ordered))
        return ordered

    async def move_after(
        self,
        user_id: str,
        role: "UserRole | str",
        template_id: str,
        after_id: Optional[str] = None,
    ) -> StepTemplate:
        """
        Insert a template between two neighbours.

        The template is placed right after ``after_id`` (or first when it is
        None) using the midpoint of the neighbouring indices. When there is no
        free integer between them every active template is renumbered.

        Args:
            user_id: Acting user
            role: Acting role (admin only)
            template_id: Template to move
            after_id: Template that should precede it, or None for the front

        Returns:
            Moved template
        """
        self._require_admin(role, "reorder_step_templates")
        if after_id == template_id:
            raise ValidationFailedError("a step cannot be placed after itself")

        async def work(uow: UnitOfWork) -> StepTemplate:
            template = await load_template(uow, template_id)
            if not template.is_active:
                raise InvalidTransitionError("step template", "inactive", "reordered")
            others = [t for t in order_templates(await uow.templates.list()) if t.id != template.id]

            position = 0
            if after_id is not None:
                ids = [t.id for t in others]
                if after_id not in ids:
                    await load_template(uow, after_id)
                    raise InvalidTransitionError("step template", "inactive", "neighbour")
                position = ids.index(after_id) + 1

            before = others[position - 1] if position > 0 else None
            after = others[position] if position < len(others) else None
            old_value = template.snapshot()

            if before is None and after is None:
                new_index: Optional[int] = self._gap
            elif before is None:
                new_index = after.order_index - self._gap
            elif after is None:
                new_index = before.order_index + self._gap
            elif after.order_index - before.order_index > 1:
                new_index = (before.order_index + after.order_index) // 2
            else:
                new_index = None

            if new_index is None:
                ordered = others[:position] + [template] + others[position:]
                await self._renumber(uow, ordered)
            else:
                template.order_index = new_index
                template.touch()
                await uow.templates.update(template)

            await uow.activity_log.record(
                user_id,
                "reorder_step_template",
                ENTITY_TYPE,
                entity_id=template.id,
                old_value=old_value,
                new_value=template.snapshot(),
            )
            return template

        template = await self._transaction(work)
        self._log("template_moved", template_id=template.id, order_index=template.order_index)
        return template

    async def deactivate_template(
        self, user_id: str, role: "UserRole | str", template_id: str
    ) -> StepTemplate:
        """
        Remove a template from future timelines.

        Existing lead steps are kept; the template no longer takes part in
        initialization or progression.
        """
        self._require_admin(role, "deactivate_step_template")

        async def work(uow: UnitOfWork) -> StepTemplate:
            template = await load_template(uow, template_id)
            if not template.is_active:
                raise InvalidTransitionError("step template", "inactive", "inactive")
            old_value = template.snapshot()
            template.is_active = False
            template.touch()
            await uow.templates.update(template)
            await uow.activity_log.record(
                user_id,
                "deactivate_step_template",
                ENTITY_TYPE,
                entity_id=template.id,
                old_value=old_value,
                new_value=template.snapshot(),
            )
            return template

        template = await self._transaction(work)
        self._log("template_deactivated", template_id=template.id)
        return template

    async def list_templates(self, include_inactive: bool = False) -> list[StepTemplate]:
        """List templates ordered by order index."""

        async def work(uow: UnitOfWork) -> list[StepTemplate]:
            return await uow.templates.list(include_inactive=include_inactive)

        templates = await self._transaction(work)
        return sorted(templates, key=_sort_key)


def _sort_key(template: StepTemplate) -> Any:
    return (template.order_index, not template.is_active)
