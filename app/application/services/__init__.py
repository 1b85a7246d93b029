"""Application services: change diff, sensitive field filter, audit recorder and queries."""

from app.application.services.audit_query_service import AuditQueryService
from app.application.services.audit_recorder import AuditRecorder
from app.application.services.change_diff import (
    MISSING,
    MISSING_MARKER_KEY,
    ChangeDiffEngine,
    FieldDiff,
    canonical_json,
    decode_missing,
    encode_missing,
    to_jsonable,
)
from app.application.services.sensitive_field_filter import (
    DEFAULT_SENSITIVE_FIELDS,
    SensitiveFieldFilter,
)

__all__ = [
    "AuditQueryService",
    "AuditRecorder",
    "ChangeDiffEngine",
    "DEFAULT_SENSITIVE_FIELDS",
    "FieldDiff",
    "MISSING",
    "MISSING_MARKER_KEY",
    "SensitiveFieldFilter",
    "canonical_json",
    "decode_missing",
    "encode_missing",
    "to_jsonable",
]
