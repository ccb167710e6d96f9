"""应用状态 CRUD。"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from organize_folder.packages.scanner.crud.base import CRUDBase
from organize_folder.packages.scanner.models.app_state import AppState


class CRUDAppState(CRUDBase[AppState]):
    def get_current(self, db: Session) -> AppState | None:
        return db.scalars(select(AppState).order_by(AppState.id)).first()


app_state_crud = CRUDAppState(AppState)
