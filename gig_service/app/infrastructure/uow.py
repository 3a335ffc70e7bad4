# app/infrastructure/uow.py

from typing import Any, Dict, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.database import transient_errors


class UoWModel:
    def __init__(self, model: Any, uow: "UnitOfWork"):
        self.__dict__["_model"] = model
        self.__dict__["_uow"] = uow

    def __getattr__(self, key):
        return getattr(self._model, key)

    def __setattr__(self, key, value):
        setattr(self._model, key, value)
        # new documents are inserted whole on commit, only existing ones go dirty
        if id(self._model) not in self._uow.new:
            self._uow.register_dirty(self._model)


class UnitOfWork:
    """
    Collects new and modified documents and writes them on commit.

    When bound to a session, commit also ends the transaction so other
    sessions (live subscriptions recompute in their own) see the writes.
    There is no delete tracking: documents here are deactivated, never removed.
    """

    def __init__(self, session: Optional[AsyncSession] = None) -> None:
        self.session = session
        self.dirty: Dict[int, Any] = {}
        self.new: Dict[int, Any] = {}
        self.mappers: Dict[Type, Any] = {}

    def register_dirty(self, model: Any) -> None:
        if isinstance(model, UoWModel):
            model = model._model
        model_id = id(model)
        if model_id not in self.new:
            self.dirty[model_id] = model

    def register_new(self, model: Any) -> UoWModel:
        if isinstance(model, UoWModel):
            model = model._model
        model_id = id(model)
        self.dirty.pop(model_id, None)
        self.new[model_id] = model
        return UoWModel(model, self)

    def rollback(self) -> None:
        self.new.clear()
        self.dirty.clear()

    async def commit(self) -> None:
        async with transient_errors("commit"):
            for model in self.new.values():
                await self.mappers[type(model)].insert(model)
            for model in self.dirty.values():
                await self.mappers[type(model)].update(model)
            if self.session is not None:
                await self.session.commit()

        # Clear all pending operations after successful commit
        self.new.clear()
        self.dirty.clear()
