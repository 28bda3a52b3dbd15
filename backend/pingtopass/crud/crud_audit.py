from typing import Any, Dict, Optional

from fastapi import Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pingtopass.crud.base import CRUDBase
from pingtopass.models.audit import AIGenerationLog, AuditLog


class AuditLogCreate(BaseModel):
    user_id: Optional[int] = None
    action: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    event_metadata: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None
    success: bool = True
    error_message: Optional[str] = None


class AIGenerationLogCreate(BaseModel):
    purpose: str
    model: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    cost_cents: Optional[float] = None
    exam_id: Optional[int] = None
    objective_id: Optional[int] = None
    question_ids: Optional[list] = None
    success: bool = True
    error_message: Optional[str] = None
    generation_time_ms: Optional[int] = None
    request_id: Optional[str] = None
    user_id: Optional[int] = None


class CRUDAuditLog(CRUDBase[AuditLog, AuditLogCreate, AuditLogCreate]):
    def log(
        self,
        db: Session,
        *,
        action: str,
        user_id: Optional[int] = None,
        entity_type: Optional[str] = None,
        entity_id: Any = None,
        metadata: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None,
        commit: bool = False
    ) -> AuditLog:
        """Add an audit entry; client details are taken from ``request`` when given."""
        obj_in = AuditLogCreate(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            event_metadata=metadata,
        )
        if request is not None:
            obj_in.ip_address = (
                request.headers.get("cf-connecting-ip")
                or request.headers.get("x-forwarded-for", "").split(",")[0].strip()
                or (request.client.host if request.client else None)
            )
            obj_in.user_agent = request.headers.get("user-agent")
            obj_in.request_id = getattr(request.state, "request_id", None)
        return self.create(db, obj_in=obj_in, commit=commit)


class CRUDAIGenerationLog(CRUDBase[AIGenerationLog, AIGenerationLogCreate, AIGenerationLogCreate]):
    pass


audit_log = CRUDAuditLog(AuditLog)
ai_generation_log = CRUDAIGenerationLog(AIGenerationLog)
