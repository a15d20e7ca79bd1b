from enum import Enum

from pydantic import BaseModel, Field


class VideoBucket(str, Enum):
    STANDARD = "standard"
    SHORT = "short"


# YouTube search `videoDuration` filter used for each bucket.
BUCKET_DURATION_FILTER = {
    VideoBucket.STANDARD: "medium",
    VideoBucket.SHORT: "short",
}


class ChannelInfo(BaseModel):
    channel_id: str
    title: str
    subscriber_count: int = Field(default=0, ge=0)
    total_view_count: int = Field(default=0, ge=0)
    video_count: int = Field(default=0, ge=0)


class ChannelCandidate(BaseModel):
    channel_id: str
    title: str


class VideoSample(BaseModel):
    video_id: str
    view_count: int = Field(default=0, ge=0)


class AverageViews(BaseModel):
    standard: int = Field(default=0, ge=0)
    short: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.standard + self.short


class EarningRange(BaseModel):
    min: int = 0
    max: int = 0
    average: int = 0


class BucketEarnings(BaseModel):
    monthly: EarningRange
    yearly: EarningRange


class EarningsEstimate(BaseModel):
    standard: BucketEarnings
    short: BucketEarnings
    total: BucketEarnings
    currency: str = "USD"


class SamplingPeriod(BaseModel):
    start: str
    end: str


class CalculateRequest(BaseModel):
    channelUrl: str | None = None
    language: str | None = "ko"
