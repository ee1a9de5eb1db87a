"""Resource handlers: one class per entity, each returning an ``Envelope``."""

from kolhub.handlers.campaigns import CampaignHandler
from kolhub.handlers.envelope import Envelope, failure, success
from kolhub.handlers.kol_types import KolTypeHandler
from kolhub.handlers.kols import KolHandler
from kolhub.handlers.reports import ReportHandler
from kolhub.handlers.users import UserHandler

__all__ = [
    "CampaignHandler",
    "Envelope",
    "KolHandler",
    "KolTypeHandler",
    "ReportHandler",
    "UserHandler",
    "failure",
    "success",
]
