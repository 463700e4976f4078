"""
Base Repository

A thin async data-access layer over one SQLAlchemy model.

The services talk to storage only through these methods, which keeps the
contract they rely on small and explicit:

    get            - one row by primary key (or None)
    find           - filtered / ordered / offset / limited rows
    count          - number of rows matching a filter
    create         - insert one row
    update_by_id   - partial update of one row
    delete_by_id   - delete one row
    delete_many    - delete every row matching a filter
    distinct       - distinct values of one column

Atomicity
=========
Every write commits immediately, so each one is atomic on its own row.
Nothing here spans several writes in one transaction: a review insert and
the rating update that follows it are two separate commits.
"""

from collections.abc import Sequence
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """
    Generic CRUD repository bound to an AsyncSession.

    Subclasses set `model` and add whatever aggregate queries their
    service needs.

    Usage:
        books = BookRepository(db)
        book = await books.get(42)
    """

    model: ClassVar[type[Base]]

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    async def get(self, obj_id: int) -> ModelT | None:
        """
        Fetch a row by primary key.

        populate_existing makes sure an instance already in the identity map
        is refreshed from the database (after a bulk UPDATE, for example)
        and gets its eager relationships loaded.
        """
        stmt = (
            select(self.model)
            .where(self.model.id == obj_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find(
        self,
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[ModelT]:
        """Rows matching all `criteria`, ordered and paginated."""
        stmt = select(self.model).where(*criteria).order_by(*order_by)
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def distinct(self, column: Any, *criteria: ColumnElement[bool]) -> list[Any]:
        """Distinct non-null values of `column`, unordered."""
        stmt = select(column).where(column.is_not(None), *criteria).distinct()
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    async def create(self, **values: Any) -> ModelT:
        """Insert one row, commit, and return it with relationships loaded."""
        obj = self.model(**values)
        self.db.add(obj)
        await self._commit()
        return await self.get(obj.id)

    async def update_by_id(self, obj_id: int, **values: Any) -> ModelT | None:
        """
        Update the given columns of one row in a single UPDATE statement.

        Columns not named in `values` are left untouched. Values may be SQL
        expressions evaluated by the database (see BookRepository.refresh_rating).
        The identity map is not synchronized; get() reloads the row instead.

        Returns:
            The refreshed row, or None if it doesn't exist
        """
        stmt = (
            update(self.model)
            .where(self.model.id == obj_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
        await self._commit()
        return await self.get(obj_id)

    async def delete_by_id(self, obj_id: int) -> bool:
        stmt = delete(self.model).where(self.model.id == obj_id)
        result = await self.db.execute(stmt)
        await self._commit()
        return result.rowcount > 0

    async def delete_many(self, *criteria: ColumnElement[bool]) -> int:
        """Delete every row matching `criteria`. Returns the number removed."""
        stmt = delete(self.model).where(*criteria)
        result = await self.db.execute(stmt)
        await self._commit()
        return result.rowcount

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
