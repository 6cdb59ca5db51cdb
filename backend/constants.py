"""
Centralized Constants - SINGLE SOURCE OF TRUTH

Remote table names, deficiency lookup tables, state groupings and KPI bands
are defined here and imported elsewhere.

DO NOT duplicate these definitions in other files.

Lookup tables (deficiency types, deficiency states) are versioned objects.
Decoders receive them as an explicit argument, so a new table version can be
introduced (or a test table swapped in) without touching decoder code.
"""

from services.bitmask import BitLabelTable, StateLabelTable

# =============================================================================
# SENTINELS
# =============================================================================

# Group-by key used when a record has no value for the grouping field
UNKNOWN = "unknown"

# Display label used when a deficiency bitmask has no known bit set
UNKNOWN_LABEL_DE = "Unbekannt"

# State breakdown label for events without a linked deficiency
NO_DEFICIENCY_LABEL = "Kein Mangel"

# Follow-up timestamps at or before this year are the store's zero-date
ZERO_DATE_MAX_YEAR = 2000


# =============================================================================
# REMOTE TABLES / VIEWS
# =============================================================================

# JOIN view of AI analysis + tenant inquiry events (one row per inquiry turn)
BASE_VIEW = "v_dashboard_base"
PROPERTY_HIERARCHY_VIEW = "v_property_hierarchy"

ACCOMMODATIONS_TABLE = "azure_accommodations"
CONDOMINIA_TABLE = "azure_real_estate_condominia"
PROPERTIES_TABLE = "azure_real_estate_properties"
DEFICIENCIES_TABLE = "azure_real_estate_deficiencies"
CRAFTSMEN_TABLE = "azure_real_estate_craftsmen"
COMPANY_CONFIGURATIONS_TABLE = "azure_real_estate_company_configurations"

BUG_CLUSTERS_TABLE = "bug_clusters"
CORRECTIONS_TABLE = "ai_analysis_corrections"
PRICING_TABLE = "ailean_pricing"

# Column selections per table (only what the pipeline reads)
ACCOMMODATION_COLUMNS = "id, name, brand"
CONDOMINIUM_COLUMNS = "id, accommodation_id, address, property_owner"
PROPERTY_COLUMNS = "id, real_estate_condominium_id, apartment_number"
DEFICIENCY_COLUMNS = (
    "id, real_estate_property_id, deficiency_types, deficiency_state, "
    "time_added, next_follow_up, tenant_name, tenant_phone_number, "
    "deficiency_total_cost, craftsman_id, deficiency_report"
)
CRAFTSMAN_COLUMNS = "id, email, company, trade"
COMPANY_CONFIGURATION_COLUMNS = (
    "accommodation_id, cosmetic_issue_response_time, "
    "partial_limitation_response_time, severe_deficiency_response_time"
)

# Date column used for range predicates on the base view
BASE_VIEW_DATE_COLUMN = "started_at"

# Stable orderings for offset paging (unordered scans may repeat or skip rows
# across windows). Every paged request carries one of these.
ID_ORDER = "id.asc"
BASE_VIEW_ORDER = "conversation_id.asc,inquiry_sequence.asc"
PROPERTY_HIERARCHY_ORDER = "property_owner.asc,brand.asc,building_address.asc"
COMPANY_CONFIGURATION_ORDER = "accommodation_id.asc"
BUG_CLUSTERS_ORDER = "status.asc,id.asc"

# Rows the data service returns per call at most (PostgREST max-rows).
# Larger windows come back short and would end paging early.
DATA_SERVICE_MAX_ROWS = 1000


# =============================================================================
# BRANDS
# =============================================================================

BRAND_ALL = "all"
BRAND_NOVAC = "novac"
BRAND_PETERHALTER = "peterhalter"

BRANDS = [BRAND_NOVAC, BRAND_PETERHALTER]


# =============================================================================
# DEFICIENCY TYPES (bitmask)
# =============================================================================

# Bit 13 marks an emergency; emergencies use the "severe" SLA threshold
EMERGENCY_BIT = 8192

DEFICIENCY_TYPES_V1 = BitLabelTable(
    version="2024.1",
    labels={
        1: "Sanitaer",
        2: "Elektrik",
        4: "Heizung",
        8: "Fenster/Tueren",
        16: "Kueche/Geraete",
        32: "Boden/Waende",
        64: "Schimmel/Feuchtigkeit",
        128: "Schaedlinge",
        256: "Aussenbereich",
        512: "Lift",
        1024: "Schliessanlage",
        2048: "Laerm",
        4096: "Reinigung",
        EMERGENCY_BIT: "Notfall",
        16384: "Sonstiges",
    },
    empty_label=UNKNOWN_LABEL_DE,
)

DEFICIENCY_TYPES = DEFICIENCY_TYPES_V1


# =============================================================================
# DEFICIENCY STATES
# =============================================================================

DEFICIENCY_STATES_V1 = StateLabelTable(
    version="2024.1",
    labels={
        0: "Gemeldet",
        1: "Handwerker zugewiesen",
        2: "Termin geplant",
        4: "Warten auf Antwort",
        6: "Zurueckgestellt",
        7: "An Handwerker gesendet",
        9: "Reparatur abgeschlossen",
        10: "Rechnung eingereicht",
        11: "Rechnung bestritten",
        12: "Kosten genehmigt",
        13: "Mieter bestaetigt",
        14: "Wiederoeffnet",
        15: "Storniert",
        16: "Mit Firmenhilfe abgeschlossen",
    },
    fallback_template="Status {state}",
)

DEFICIENCY_STATES = DEFICIENCY_STATES_V1

# State 15 (cancelled) does NOT count as solved
SOLVED_STATES = frozenset({4, 9, 13})

# Terminal states whose follow-up timestamp marks the closing time
CLOSING_STATES = frozenset({9, 13, 15})

FIRST_ESCALATION_STATES = frozenset({6, 9, 12})
SECOND_ESCALATION_STATES = frozenset({11, 13, 14})
ESCALATED_STATES = FIRST_ESCALATION_STATES | SECOND_ESCALATION_STATES

# Substrings of a state label that mark a finished craftsman job
RESOLVED_STATE_KEYWORDS = (
    "resolved",
    "completed",
    "closed",
    "done",
    "fertig",
    "abgeschlossen",
)


# =============================================================================
# SLA THRESHOLDS
# =============================================================================

# Configuration codes look like "WorkdaysWithin48Hours"
SLA_CODE_HOURS = {
    "8Hours": 8,
    "24Hours": 24,
    "48Hours": 48,
    "72Hours": 72,
}
SLA_DEFAULT_HOURS = 72

# Elapsed time up to threshold * factor is "at risk", beyond is "breached"
SLA_AT_RISK_FACTOR = 1.5

SLA_COMPLIANT = "compliant"
SLA_AT_RISK = "at_risk"
SLA_BREACHED = "breached"


# =============================================================================
# SENTIMENT
# =============================================================================

POSITIVE_SENTIMENTS = frozenset({"satisfied", "positive"})
NEGATIVE_SENTIMENTS = frozenset({"frustrated", "urgent", "negative"})

# Transition list returned to the dashboard is capped
MAX_SENTIMENT_TRANSITIONS = 20


# =============================================================================
# CONVERSATION FRICTION
# =============================================================================

# (label, lower bound inclusive, upper bound inclusive or None)
PING_PONG_BANDS = [
    ("Normal (0-3)", 0, 3),
    ("Erhoeht (4-6)", 4, 6),
    ("Bedenklich (7-10)", 7, 10),
    ("Loop (>10)", 11, None),
]

# First-response times outside (0, 120) seconds are excluded from the median
MEDIAN_FIRST_RESPONSE_MAX_SEC = 120

# Composite effort score weights (contact, elapsed, friction, resolution)
EFFORT_WEIGHTS = (0.30, 0.20, 0.25, 0.25)

# Elapsed minutes are capped before tiering
EFFORT_DURATION_CAP_MIN = 60


# =============================================================================
# ROI
# =============================================================================

DEFAULT_MANUAL_COST_PER_INQUIRY = 15
DEFAULT_AILEAN_COST_PER_INQUIRY = 2


# =============================================================================
# LIST CAPS
# =============================================================================

TOP_TENANTS_LIMIT = 50
TOP_USERS_LIMIT = 20
TOP_CRAFTSMAN_COMPANIES_LIMIT = 20

# Deficiency report bodies need more than this many characters to count
MIN_REPORT_LENGTH = 5

# Four-digit postal code followed by a town name, e.g. "Seestrasse 1, 8002 Zuerich"
POSTAL_CODE_PATTERN = r"(\d{4})\s+\w"
