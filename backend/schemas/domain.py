"""Domain models and entities"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel


def parse_timestamp(value: Any) -> datetime:
    """
    Coerce store timestamps to timezone-aware UTC datetimes.

    Accepts datetimes, ISO-8601 strings (with or without a trailing 'Z'),
    epoch seconds, and {"seconds": ...} objects. Missing values become now.
    """
    if value is None or value == "":
        return datetime.now(timezone.utc)
    if isinstance(value, dict) and "seconds" in value:
        value = value["seconds"]
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC ISO-8601 with milliseconds, so stored strings sort chronologically"""
    value = parse_timestamp(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


Timestamp = Annotated[
    datetime,
    BeforeValidator(parse_timestamp),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys (store documents and API payloads)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(str, Enum):
    IMAGE_EDITING = "Image Editing"
    IMAGE_GENERATION = "Image Generation"
    VIDEO_EDITING = "Video Editing"
    WRITING_ASSISTANT = "Writing Assistant"
    CODE_GENERATION = "Code Generation"
    AUDIO_MUSIC = "Audio/Music"
    DESIGN_3D = "3D/Design"
    PRODUCTIVITY = "Productivity"


class PricingModel(str, Enum):
    FREE = "free"
    FREEMIUM = "freemium"
    PAID = "paid"
    TRIAL_ONLY = "trial_only"


class SortOption(str, Enum):
    RISING = "rising"
    RECENT = "recent"
    ESTABLISHED = "established"


class StoreSort(str, Enum):
    """Native orderings understood by the document store"""
    TRENDING = "trending"
    FRESHNESS = "freshness"
    MENTIONS = "mentions"


SORT_TO_STORE = {
    SortOption.RISING: StoreSort.TRENDING,
    SortOption.RECENT: StoreSort.FRESHNESS,
    SortOption.ESTABLISHED: StoreSort.MENTIONS,
}


class Freshness(str, Enum):
    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"
    ALL = "all"


class DataTraining(str, Enum):
    EXPLICIT = "explicit"
    OPTING_OUT = "opting-out"
    UNKNOWN = "unknown"
    NO_TRAINING = "no-training"


class DataRetention(str, Enum):
    PERMANENT = "permanent"
    LIMITED = "limited"
    MINIMAL = "minimal"
    UNKNOWN = "unknown"


class PolicyQuality(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    UNKNOWN = "unknown"


class DataTier(str, Enum):
    """Which data source produced a result"""
    PRIMARY = "primary"
    FALLBACK = "fallback"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FreeTier(CamelModel):
    exists: bool = False
    limit: str = "N/A"
    watermark: bool = False
    requires_signup: bool = False
    requires_card: bool = False
    commercial_use: bool = False
    attribution: bool = False

    @model_validator(mode="after")
    def _clear_flags_without_free_tier(self):
        # Flags only describe an existing free tier; never let them read as true otherwise
        if not self.exists:
            self.limit = "N/A"
            self.watermark = False
            self.requires_signup = False
            self.requires_card = False
            self.commercial_use = False
            self.attribution = False
        return self


class PaidTier(CamelModel):
    start_price: str = "N/A"
    billing_options: List[str] = Field(default_factory=list)


class Pricing(CamelModel):
    model: PricingModel = PricingModel.FREE
    free_tier: FreeTier = Field(default_factory=FreeTier)
    paid_tier: PaidTier = Field(default_factory=PaidTier)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source_url: str = ""
    last_checked_at: Timestamp = Field(default_factory=utc_now)
    ambiguities: List[str] = Field(default_factory=list)

    @property
    def is_truly_free(self) -> bool:
        """Free tier exists, needs no card and leaves no watermark"""
        tier = self.free_tier
        return tier.exists and not tier.requires_card and not tier.watermark


class Tool(CamelModel):
    id: str
    name: str
    description: str = ""
    category: Category
    official_url: str = ""
    first_seen_at: Timestamp
    last_verified_at: Timestamp
    mention_count: int = Field(default=0, ge=0)
    trend_score: float = Field(default=0, ge=0, le=100)
    pricing: Pricing = Field(default_factory=Pricing)


class TrustScore(CamelModel):
    overall: float = Field(default=50, ge=0, le=100)
    data_training: DataTraining = DataTraining.UNKNOWN
    data_retention: DataRetention = DataRetention.UNKNOWN
    country_of_origin: str = "unknown"
    privacy_policy_quality: PolicyQuality = PolicyQuality.UNKNOWN
    third_party_sharing: bool = False
    compliance: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    analyzed_at: Optional[Timestamp] = None
    source_url: Optional[str] = None


class ToolFilters(CamelModel):
    """Ephemeral, client-held filter set; defaults apply no predicate"""
    truly_free: bool = False
    no_signup: bool = False
    commercial_use: bool = False
    pricing_models: List[PricingModel] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)
    freshness: Freshness = Freshness.ALL


class ToolQuery(CamelModel):
    filters: ToolFilters = Field(default_factory=ToolFilters)
    sort: SortOption = SortOption.RISING
    limit: int = 20
    offset: int = Field(default=0, ge=0)


class ToolPage(CamelModel):
    tools: List[Tool] = Field(default_factory=list)
    total: int = 0
    has_more: bool = False
    tier: DataTier = DataTier.PRIMARY


class Mention(CamelModel):
    tool_id: str
    source: str = "reddit"
    url: str = ""
    title: str = ""
    mentioned_at: Timestamp = Field(default_factory=utc_now)


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SCRAPED = "scraped"
    CLASSIFYING = "classifying"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisJob(CamelModel):
    id: str
    url: str
    tool_id: Optional[str] = None
    tool_name: Optional[str] = None
    category: Optional[Category] = None
    status: JobStatus = JobStatus.PENDING
    error: Optional[str] = None
    created_at: Timestamp = Field(default_factory=utc_now)
    updated_at: Timestamp = Field(default_factory=utc_now)


class ScrapedSite(CamelModel):
    """Text extracted from a tool's website"""
    homepage_text: str = ""
    pricing_text: str = ""
    faq_text: str = ""
    scraped_at: Timestamp = Field(default_factory=utc_now)
