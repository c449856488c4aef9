from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError, field_validator

from .errors import InputError


class ScrapeRequest(BaseModel):
    """
    One incoming scrape call. Built once, discarded after the response.

    Attributes:
        target_url (HttpUrl): Absolute http(s) URL to load.
        user_agent (str | None): Optional User-Agent override for the browser context.
    """

    model_config = ConfigDict(frozen=True)

    target_url: HttpUrl
    user_agent: str | None = None

    @field_validator("user_agent")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        # ?ua= with an empty value means "no override"
        return value or None

    @property
    def url(self) -> str:
        return str(self.target_url)

    @classmethod
    def from_query(cls, url: str | None, ua: str | None = None) -> "ScrapeRequest":
        """Build from raw query parameters, raising InputError on a bad URL."""
        try:
            return cls(target_url=(url or "").strip(), user_agent=ua)
        except ValidationError as e:
            raise InputError("Invalid URL") from e


class ScrapeResult(BaseModel):
    """
    Extracted page data returned to the caller.

    Fields:
        title            : document title, None when the page has none.
        meta_description : description meta (or og:description), serialized
                           as "metaDescription".
        h1               : trimmed text of the first <h1>.
        status           : always 200 for a successful scrape.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    meta_description: str | None = Field(default=None, alias="metaDescription")
    h1: str | None = None
    status: int = 200

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True)


@dataclass
class AttemptOutcome:
    """
    Result of a single extraction attempt inside the RetryController.

    Exactly one of `result` / `error` is set.
    """

    attempt: int
    result: ScrapeResult | None = None
    error: BaseException | None = None
    elapsed_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None
