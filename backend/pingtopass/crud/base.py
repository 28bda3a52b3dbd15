from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union, Tuple

from pydantic import BaseModel
from sqlalchemy import asc, desc
from sqlalchemy.orm import Session

from pingtopass.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        Generic create/read/update/delete helpers bound to one model.

        Write helpers take ``commit``; pass ``commit=False`` to only flush,
        so the caller can group several writes in ``transaction()``.

        **Parameters**

        * `model`: SQLAlchemy model class
        """
        self.model = model

    def get(self, db: Session, obj_id: Any) -> Optional[ModelType]:
        if obj_id is None:
            return None
        return db.get(self.model, obj_id)

    def _apply_filters(self, query, filter_conditions: Optional[Dict[str, Any]]):
        if filter_conditions:
            for field, value in filter_conditions.items():
                if hasattr(self.model, field):
                    query = query.filter(getattr(self.model, field) == value)
        return query

    def get_multi(
        self,
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        filter_conditions: Optional[Dict[str, Any]] = None,
        sort_by: Optional[Union[str, List[Tuple[str, SortDirection]]]] = None
    ) -> List[ModelType]:
        """
        Fetch a page of records with equality filters and ordering.

        Args:
            db: database session
            skip: rows to skip
            limit: maximum rows to return
            filter_conditions: column -> value equality filters, e.g. {"user_id": 1}
            sort_by: a column name (ascending) or a list of (column, direction)

        Returns:
            List[ModelType]: matching records
        """
        query = self._apply_filters(db.query(self.model), filter_conditions)

        if sort_by:
            if isinstance(sort_by, str):
                query = query.order_by(asc(getattr(self.model, sort_by)))
            else:
                for field, direction in sort_by:
                    if hasattr(self.model, field):
                        column = getattr(self.model, field)
                        query = query.order_by(desc(column) if direction == SortDirection.DESC else asc(column))

        return query.offset(skip).limit(limit).all()

    def _save(self, db: Session, db_obj: ModelType, commit: bool) -> ModelType:
        db.add(db_obj)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]], commit: bool = True) -> ModelType:
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(mode="json")
        return self._save(db, self.model(**obj_in_data), commit)

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        commit: bool = True
    ) -> ModelType:
        """
        Update an existing record.

        Only fields explicitly set on the schema (or present in the dict)
        are written.
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(mode="json", exclude_unset=True)

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        return self._save(db, db_obj, commit)
