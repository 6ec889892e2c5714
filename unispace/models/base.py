from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, DateTime, Integer, event, false
from sqlalchemy.orm import Session, with_loader_criteria


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SoftDeleteMixin:
    """Audit columns plus soft delete.

    Rows flagged ``is_deleted`` are hidden from every ORM select unless the
    query opts in with ``.execution_options(include_deleted=True)``.
    """

    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    created_by = Column(Integer, nullable=True)
    updated_at = Column(DateTime, nullable=True)
    updated_by = Column(Integer, nullable=True)
    deleted_at = Column(DateTime, nullable=True)
    deleted_by = Column(Integer, nullable=True)

    def soft_delete(self, actor_id=None, when=None):
        self.is_deleted = True
        self.deleted_at = when or utcnow()
        self.deleted_by = actor_id

    def touch(self, actor_id=None, when=None):
        self.updated_at = when or utcnow()
        self.updated_by = actor_id


@event.listens_for(Session, "do_orm_execute")
def _hide_soft_deleted(execute_state):
    if (
        execute_state.is_select
        and not execute_state.is_column_load
        and not execute_state.is_relationship_load
        and not execute_state.execution_options.get("include_deleted", False)
    ):
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(
                SoftDeleteMixin,
                lambda cls: cls.is_deleted == false(),
                include_aliases=True,
            )
        )
