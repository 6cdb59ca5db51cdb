"""
Typed records for rows fetched from the remote data service.

Rows arrive as loosely typed JSON dicts. They are validated ONCE, right after
fetch, into the models below. Downstream code never sees a raw dict.

Coercion rules (BaseRecord):
- Unknown columns are ignored.
- A missing field takes its default.
- A field whose value cannot be coerced to the declared type takes its
  default instead of failing the whole row.
- Identifiers are normalized to strings so int and uuid keys join the same way.
- Timestamps parse from ISO strings; naive values are taken as UTC.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Iterable, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    field_validator,
)

logger = logging.getLogger('data_source')

R = TypeVar('R', bound='BaseRecord')


def _id_to_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


RecordId = Annotated[Optional[str], BeforeValidator(_id_to_str)]


class BaseRecord(BaseModel):
    """
    Base model for all fetched rows.

    Every field must declare a default; the default is what a missing or
    malformed value collapses to.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra='ignore',
    )

    @field_validator('*', mode='wrap')
    @classmethod
    def coerce_to_default(cls, value, handler, info: ValidationInfo):
        try:
            result = handler(value)
        except ValidationError:
            field_info = cls.model_fields[info.field_name]
            logger.debug(
                "record_field_coerced model=%s field=%s value=%r",
                cls.__name__, info.field_name, value,
            )
            return field_info.get_default(call_default_factory=True)
        if isinstance(result, datetime) and result.tzinfo is None:
            result = result.replace(tzinfo=timezone.utc)
        return result


def parse_records(model: Type[R], rows: Iterable[dict]) -> List[R]:
    """Validate raw rows into records of the given model."""
    return [model.model_validate(row) for row in rows if isinstance(row, dict)]


# =============================================================================
# PROPERTY HIERARCHY
# =============================================================================

class Accommodation(BaseRecord):
    id: RecordId = None
    name: Optional[str] = None
    brand: Optional[str] = None


class Condominium(BaseRecord):
    id: RecordId = None
    accommodation_id: RecordId = None
    address: Optional[str] = None
    property_owner: Optional[str] = None


class Property(BaseRecord):
    id: RecordId = None
    real_estate_condominium_id: RecordId = None
    apartment_number: Optional[str] = None

    @field_validator('apartment_number', mode='before')
    @classmethod
    def apartment_number_to_str(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return _id_to_str(v)
        return v


class Deficiency(BaseRecord):
    id: RecordId = None
    real_estate_property_id: RecordId = None
    deficiency_types: int = 0
    deficiency_state: Optional[int] = None
    time_added: Optional[datetime] = None
    next_follow_up: Optional[datetime] = None
    tenant_name: Optional[str] = None
    tenant_phone_number: Optional[str] = None
    deficiency_total_cost: Optional[float] = None
    craftsman_id: RecordId = None
    deficiency_report: Optional[str] = None

    @field_validator('deficiency_types', mode='before')
    @classmethod
    def null_types_to_zero(cls, v):
        return 0 if v is None else v


class Craftsman(BaseRecord):
    id: RecordId = None
    email: Optional[str] = None
    company: Optional[str] = None
    trade: Optional[str] = None


class CompanyConfiguration(BaseRecord):
    accommodation_id: RecordId = None
    cosmetic_issue_response_time: Optional[str] = None
    partial_limitation_response_time: Optional[str] = None
    severe_deficiency_response_time: Optional[str] = None


class PropertyHierarchyRow(BaseRecord):
    """Pre-aggregated row of the property hierarchy view (one per building)."""
    property_owner: Optional[str] = None
    brand: Optional[str] = None
    building_address: Optional[str] = None
    total_inquiries: int = 0
    deficiency_reports: int = 0
    resolved_count: int = 0
    tenant_count: int = 0
    avg_quality_score: Optional[float] = None
    avg_duration_min: Optional[float] = None

    @field_validator(
        'total_inquiries', 'deficiency_reports', 'resolved_count', 'tenant_count',
        mode='before',
    )
    @classmethod
    def null_counts_to_zero(cls, v):
        return 0 if v is None else v


# =============================================================================
# INQUIRY EVENTS (dashboard base view: AI analysis joined with events)
# =============================================================================

class InquiryEvent(BaseRecord):
    # Identity
    conversation_id: Optional[str] = None
    inquiry_sequence: Optional[int] = None
    phone_number: Optional[str] = None
    brand: Optional[str] = None

    # Classification
    intent: Optional[str] = None
    inquiry_type: Optional[str] = None
    topic_labels: List[str] = []
    deficiency_category: Optional[str] = None
    language_used: Optional[str] = None
    estimated_severity: Optional[str] = None
    tenant_sentiment: Optional[str] = None
    resolution_method: Optional[str] = None
    event_outcome: Optional[str] = None
    sla_compliance: Optional[str] = None
    event_summary: Optional[str] = None

    # Timing
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    first_response_sec: Optional[float] = None
    duration_minutes: Optional[float] = None
    time_to_deficiency_report_sec: Optional[float] = None
    is_inside_hours: Optional[bool] = None
    started_dow: Optional[int] = None
    started_hour_cet: Optional[int] = None

    # Message counts
    message_count: Optional[int] = None
    inbound_count: Optional[int] = None
    ai_count: Optional[int] = None
    ping_pong_count: Optional[int] = None
    automation_rate: Optional[float] = None

    # AI quality flags
    ai_quality_score: Optional[float] = None
    tenant_effort_score: Optional[float] = None
    ai_unnecessary_questions: Optional[float] = None
    ai_loop_detected: Optional[bool] = None
    ai_misunderstood: Optional[bool] = None
    ai_correct_triage: Optional[bool] = None
    is_urgent: Optional[bool] = None
    has_agent_takeover: Optional[bool] = None

    # Deficiency linkage
    has_deficiency_report: Optional[bool] = None
    has_craftsman: Optional[bool] = None
    deficiency_state: Optional[int] = None
    deficiency_state_label: Optional[str] = None
    deficiency_state_category: Optional[str] = None
    deficiency_total_cost: Optional[float] = None

    # Bug tracking / review
    is_bug: Optional[bool] = None
    bug_false_success: Optional[bool] = None
    bug_failed_report: Optional[bool] = None
    bug_category: Optional[str] = None
    bug_cluster_label: Optional[str] = None
    bug_reviewed_at: Optional[datetime] = None
    linear_issue_id: Optional[str] = None
    reproducible: Optional[str] = None
    review_status: Optional[str] = None

    @field_validator('topic_labels', mode='before')
    @classmethod
    def null_topics_to_empty(cls, v):
        return [] if v is None else v

    @field_validator('conversation_id', 'phone_number', mode='before')
    @classmethod
    def numeric_ids_to_str(cls, v):
        return _id_to_str(v)


# =============================================================================
# BUG TRACKING / REVIEW / PRICING
# =============================================================================

class BugCluster(BaseRecord):
    id: RecordId = None
    cluster_label: Optional[str] = None
    bug_category: Optional[str] = None
    root_cause_description: Optional[str] = None
    event_count: int = 0
    first_seen_at: Optional[str] = None
    last_seen_at: Optional[str] = None
    linear_parent_issue_id: Optional[str] = None
    sprint_ready: bool = False
    status: Optional[str] = None

    @field_validator('event_count', 'sprint_ready', mode='before')
    @classmethod
    def null_to_default(cls, v, info: ValidationInfo):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v


class Correction(BaseRecord):
    id: RecordId = None
    field_corrected: Optional[str] = None
    status: Optional[str] = None


class Pricing(BaseRecord):
    manual_cost_per_inquiry: Optional[float] = None
    ailean_cost_per_inquiry: Optional[float] = None
