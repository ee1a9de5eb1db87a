"""Row shapes returned by the persistence gateway, one ``TypedDict`` per table.

Update allow-lists in ``kolhub.changes.fields`` are checked against these
declarations when that module is imported.
"""

from typing import TypedDict


class UserRecord(TypedDict):
    id: int
    username: str
    email: str
    password: str
    role: str
    created_at: str


class KolTypeRecord(TypedDict):
    id: int
    name: str
    min_followers: int
    max_followers: int | None


class KolRecord(TypedDict):
    id: int
    name: str
    niche: str
    followers: int
    engagement_rate: float
    reach: int
    rate_card: float
    audience_male: float
    audience_female: float
    audience_age_range: str


class CampaignRecord(TypedDict):
    id: int
    user_id: int | None
    name: str
    kol_type_id: int
    target_niche: str
    target_engagement: float
    target_reach: int
    target_gender: str
    target_gender_min: float
    target_age_range: str
    start_date: str
    end_date: str
    created_at: str


class CampaignKolRecord(TypedDict):
    id: int
    campaign_id: int
    kol_id: int


class ReportRecord(TypedDict):
    id: int
    campaign_id: int
    kol_id: int
    like_count: int
    comment_count: int
    share_count: int
    save_count: int
    engagement: float
    reach: int
    er: float
    cpe: float
