"""Relations between models.

Relations are resolved by name from the :class:`RelationCollection` of the
owner model. Belongs-to relations are derived from the ``BelongsTo`` columns
of the schema, has-many relations are declared on the model definition::

    article.relation("category")          # BelongsTo, a record or None
    brand.relation("cars").order("name")  # HasMany, a Query
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from .exceptions import ActiveRecordClassNotValid, RelationNotDefined
from .log import get_logger
from .schema import BelongsTo
from .utils import singularize

if TYPE_CHECKING:
    from .model import Model
    from .models import HasManyDefinition
    from .query import Query
    from .record import ActiveRecord

logger = get_logger(__name__)


class Relation(ABC):
    """A named relation from an owner model to a related model."""

    def __init__(self, owner: Model, related_id: str, as_: str) -> None:
        self.owner = owner
        self.related_id = related_id
        self.as_ = as_

    @property
    def related(self) -> Model:
        """Get the related model, it is instantiated on first use."""
        return self.owner.models[self.related_id]

    @abstractmethod
    def __call__(self, record: ActiveRecord) -> Any:
        """Resolve the relation for a record of the owner model."""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.owner.id}.{self.as_} -> {self.related_id}>"


class BelongsToRelation(Relation):
    """The owner record holds the key of one related record."""

    def __init__(
        self,
        owner: Model,
        related_id: str,
        local_key: str,
        foreign_key: str | None = None,
        as_: str | None = None,
    ) -> None:
        """Initialize the relation.

        Args:
            owner: Model holding the foreign key
            related_id: Identifier of the related model
            local_key: Column of the owner holding the foreign key
            foreign_key: Column of the related model referenced by the
                foreign key, its primary key by default
            as_: Name of the relation, the singular related identifier by default
        """
        super().__init__(owner, related_id, as_ or singularize(related_id))
        self.local_key = local_key
        self._foreign_key = foreign_key

    @property
    def foreign_key(self) -> str:
        if self._foreign_key is None:
            primary = self.related.primary

            if not isinstance(primary, str):
                raise ValueError(
                    f"Relation `{self.as_}` requires a single primary key on"
                    f" model `{self.related_id}`"
                )

            self._foreign_key = primary

        return self._foreign_key

    def __call__(self, record: ActiveRecord) -> ActiveRecord | None:
        key = getattr(record, self.local_key, None)

        if key is None:
            return None

        return self.related.find(key)

    def assign(self, record: ActiveRecord, related_record: ActiveRecord | None) -> None:
        """Set the foreign key of a record from a related record."""
        key = None

        if related_record is not None:
            key = getattr(related_record, self.foreign_key)

        setattr(record, self.local_key, key)


class HasManyRelation(Relation):
    """Records of the related model hold the key of the owner record."""

    def __init__(
        self,
        owner: Model,
        related_id: str,
        local_key: str | None = None,
        foreign_key: str | None = None,
        as_: str | None = None,
        through: str | None = None,
    ) -> None:
        """Initialize the relation.

        Args:
            owner: Model referenced by the related records
            related_id: Identifier of the related model
            local_key: Column of the owner, its primary key by default
            foreign_key: Column of the related model, the primary key of the
                owner by default
            as_: Name of the relation, the related identifier by default
            through: Identifier of a pivot model belonging to both the owner
                and the related model
        """
        super().__init__(owner, related_id, as_ or related_id)
        primary = owner.primary if isinstance(owner.primary, str) else None
        self.local_key = local_key or primary
        self.foreign_key = foreign_key or primary
        self.through = through

        if self.local_key is None or self.foreign_key is None:
            raise ValueError(
                f"Relation `{self.as_}` of model `{owner.id}` requires explicit keys"
            )

    def __call__(self, record: ActiveRecord) -> Query:
        key = getattr(record, self.local_key, None)

        if self.through:
            return self._query_through(key)

        return self.related.where({self.foreign_key: key})

    def _query_through(self, key: Any) -> Query:
        owner = self.owner
        related = self.related
        pivot = owner.models[self.through]
        to_owner = self._pivot_relation(pivot, owner.id)
        to_related = self._pivot_relation(pivot, related.id)
        pivot_table = pivot.table_name

        return (
            related.select(f"`{related.alias}`.*")
            .join(
                f"INNER JOIN `{pivot_table}` ON `{pivot_table}`.`{to_related.local_key}`"
                f" = `{related.alias}`.`{related.primary}`"
            )
            .join(
                f"INNER JOIN `{owner.table_name}` `{owner.alias}` ON"
                f" `{pivot_table}`.`{to_owner.local_key}` = `{owner.alias}`.`{owner.primary}`"
            )
            .where(f"`{owner.alias}`.`{owner.primary}` = ?", key)
        )

    def _pivot_relation(self, pivot: Model, related_id: str) -> BelongsToRelation:
        relation = pivot.relations.find(
            lambda r: isinstance(r, BelongsToRelation) and r.related_id == related_id
        )

        if relation is None:
            raise RelationNotDefined(related_id, pivot)

        return relation


class RelationCollection:
    """Relations of a model, by name."""

    def __init__(self, owner: Model, has_many: tuple[HasManyDefinition, ...] = ()) -> None:
        """Build the relations of a model.

        Raises:
            ActiveRecordClassNotValid: If the model declares relations but is
                not bound to a concrete record class
        """
        self.owner = owner
        self._relations: dict[str, Relation] = {}

        for column_id, column in owner.extended_schema.belongs_to.items():
            self._add(
                BelongsToRelation(owner, column.associate, column_id, as_=column.as_ or None)
            )

        for definition in has_many:
            self._add(
                HasManyRelation(
                    owner,
                    definition.associate,
                    local_key=definition.local_key,
                    foreign_key=definition.foreign_key,
                    as_=definition.as_,
                    through=definition.through,
                )
            )

        if self._relations:
            _ensure_concrete_record_class(owner)

    def _add(self, relation: Relation) -> None:
        self._relations[relation.as_] = relation
        logger.debug(f"Defined relation {relation!r}")

    def __getitem__(self, name: str) -> Relation:
        try:
            return self._relations[name]
        except KeyError as e:
            raise RelationNotDefined(name, self.owner) from e

    def __contains__(self, name: object) -> bool:
        return name in self._relations

    def __iter__(self) -> Iterator[str]:
        return iter(self._relations)

    def __len__(self) -> int:
        return len(self._relations)

    def find(self, predicate: Callable[[Relation], bool]) -> Relation | None:
        """Get the first relation matching a predicate."""
        for relation in self._relations.values():
            if predicate(relation):
                return relation

        return None


def _ensure_concrete_record_class(owner: Model) -> None:
    from .record import ActiveRecord

    record_class = owner.record_class

    if record_class is None or record_class is ActiveRecord:
        raise ActiveRecordClassNotValid(
            record_class,
            f"Relations of model `{owner.id}` require a concrete ActiveRecord class.",
        )
