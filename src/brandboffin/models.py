from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WireModel(BaseModel):
    """Base for models serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ==================== REQUEST PAYLOAD ====================
class ApiPayload(BaseModel):
    """What a core function receives from the request adapter."""

    body: Any = None
    query_parameters: dict = Field(default_factory=dict)
    path_parameters: dict = Field(default_factory=dict)

    def param(self, *names: str) -> Any:
        """First non-empty value for any of `names`, body before query string."""
        sources = []
        if isinstance(self.body, dict):
            sources.append(self.body)
        sources.append(self.query_parameters)
        for source in sources:
            for name in names:
                value = source.get(name)
                if value is not None and value != "":
                    return value
        return None


# ==================== DOMAINS ====================
class DomainCheckResult(WireModel):
    domain: str
    available: bool
    error: Optional[str] = Field(default=None, description="Sanitized failure message; implies available=False")


class DomainSuggestion(WireModel):
    domain_name: str = Field(alias="domainName")
    available: bool


class TLDPrice(WireModel):
    tld: str
    registration_price: Optional[float] = Field(default=None, alias="registrationPrice")
    renewal_price: Optional[float] = Field(default=None, alias="renewalPrice")
    transfer_price: Optional[float] = Field(default=None, alias="transferPrice")
    currency: Optional[str] = None


class DomainCheckResponse(WireModel):
    result: DomainCheckResult


class BatchDomainCheckResponse(WireModel):
    results: List[DomainCheckResult]


class DomainSuggestionsResponse(WireModel):
    suggestions: List[DomainSuggestion]


class TLDPricesResponse(WireModel):
    prices: List[TLDPrice]


# ==================== BRANDS ====================
class BrandNameRequest(WireModel):
    prompt: str = Field(..., description="Core idea or description of the business")
    industry: Optional[str] = None
    style: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    length: Optional[int] = Field(default=None, ge=1, le=64, description="Approximate brand name length in characters")
    count: int = Field(default=6, ge=1, le=20)

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, v):
        if not v or not v.strip():
            raise ValueError("Prompt is required and must be a non-empty string")
        return v.strip()

    @field_validator("industry", "style")
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    @field_validator("keywords")
    @classmethod
    def clean_keywords(cls, v):
        cleaned = []
        for keyword in v:
            keyword = keyword.strip()
            if keyword and keyword not in cleaned:
                cleaned.append(keyword)
        return cleaned


class BrandNameSuggestion(WireModel):
    name: str
    tagline: str
    suggested_domains: Optional[List[str]] = Field(default=None, alias="suggestedDomains")


class BrandNameSuggestionsResponse(WireModel):
    suggestions: List[BrandNameSuggestion]
