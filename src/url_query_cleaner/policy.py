"""Tracking categories and the policy that decides which of them survive."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from url_query_cleaner.utils import coerce_bool

TRACKING_CATEGORIES: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "utm": frozenset(
            {
                "utm_source",
                "utm_medium",
                "utm_campaign",
                "utm_term",
                "utm_content",
                "utm_id",
                "utm_source_platform",
                "utm_creative_format",
                "utm_marketing_tactic",
                "utm_name",
                "utm_cid",
                "utm_reader",
                "utm_viz_id",
                "utm_pubreferrer",
                "utm_swu",
                "utm_brand",
                "utm_social",
                "utm_social-type",
            }
        ),
        "gclid": frozenset({"gclid"}),
        "gclsrc": frozenset({"gclsrc"}),
        "dclid": frozenset({"dclid"}),
        "fbclid": frozenset({"fbclid"}),
        # "mscklid" is a frequent misspelling seen in the wild.
        "msclkid": frozenset({"msclkid", "mscklid"}),
        "zanpid": frozenset({"zanpid"}),
        "yclid": frozenset({"yclid"}),
        "mailchimp": frozenset({"mc_cid", "mc_eid"}),
        "igshid": frozenset({"igshid"}),
    }
)

_FLAG_PREFIX = "allow_"


@dataclass(frozen=True)
class TrackingPolicy:
    """Which tracking categories are allowed to stay on a URL.

    Every flag defaults to ``False``, so ``TrackingPolicy()`` strips every
    known tracking parameter.
    """

    #: Urchin Tracking Module parameters (``utm_source``, ``utm_medium``, ...).
    allow_utm: bool = False
    #: Google click identifier.
    allow_gclid: bool = False
    #: Google Ads click source.
    allow_gclsrc: bool = False
    #: DoubleClick click identifier, now Google.
    allow_dclid: bool = False
    #: Facebook click identifier.
    allow_fbclid: bool = False
    #: Microsoft Bing Ads click identifier.
    allow_msclkid: bool = False
    #: zanox click identifier, now Awin.
    allow_zanpid: bool = False
    #: Yandex click identifier.
    allow_yclid: bool = False
    #: Mailchimp campaign and email identifiers.
    allow_mailchimp: bool = False
    #: Instagram share identifier.
    allow_igshid: bool = False

    def resolve(self) -> frozenset[str]:
        """Return the parameter names of every category that is not allowed."""
        blocked: set[str] = set()
        for category, names in TRACKING_CATEGORIES.items():
            if not getattr(self, _FLAG_PREFIX + category):
                blocked.update(names)
        return frozenset(blocked)

    def allowed_categories(self) -> tuple[str, ...]:
        return tuple(
            category
            for category in TRACKING_CATEGORIES
            if getattr(self, _FLAG_PREFIX + category)
        )

    @classmethod
    def allowing(cls, *categories: str) -> "TrackingPolicy":
        return cls.from_mapping({category: True for category in categories})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TrackingPolicy":
        flags: dict[str, bool] = {}
        for category, value in data.items():
            key = str(category).strip().lower()
            if key not in TRACKING_CATEGORIES:
                known = ", ".join(TRACKING_CATEGORIES)
                raise ValueError(f"Unknown tracking category: {category!r} (known: {known})")
            flags[_FLAG_PREFIX + key] = coerce_bool(value)
        return cls(**flags)

