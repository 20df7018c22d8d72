"""
Scheme Source and Filter
Fetches yojana records, normalizes their varying field names,
and narrows them by the user's extracted criteria
"""
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import aiohttp

from ..schemas import Scheme
from .slots import SLOT_AGE, SLOT_DISABILITY, SLOT_PERCENTAGE, mentions_disability

logger = logging.getLogger(__name__)


# Source field names, most specific first
_ID_FIELDS = ("id", "YojanaId", "yojanaId")
_NAME_FIELDS = ("name", "YojanaName", "yojanaName")
_DESCRIPTION_FIELDS = ("description", "YojanaDescription", "yojanaDescription")
_MIN_AGE_FIELDS = ("minAge", "min_age", "Start_Age", "StartAge")
_MAX_AGE_FIELDS = ("maxAge", "max_age", "UpTo_Age", "UpToAge")
_DEADLINE_FIELDS = ("applicationDeadline", "YojanaApplayLastDate", "YojanaApplyLastDate")
_PUBLISH_DATE_FIELDS = ("publishDate", "YojanaPublishDate")
_PERCENTAGE_FIELDS = (
    "requiredDisabilityPercentage",
    "requiredDisabilityPercentages",
    "RequiredPercentage",
    "tblYojanaDivyangTypePercentages",
)
_TYPE_FIELDS = ("applicableDisabilityTypes", "DisabilityType", "tblDivyangTypes")
_PUBLISHER_FIELDS = ("publisher", "PublishedBy")

_PERCENTAGE_KEYS = ("Percentage", "percentage", "DivyangPercentage", "MinPercentage", "RequiredPercentage")
_TYPE_NAME_KEYS = ("DivyangTypeName", "DivyangType", "DisabilityType", "name", "Name")

ALL_DISABILITY_TYPES = {"all", "any", "सर्व", "सर्व प्रकार", "सभी"}


def _first(record: Dict[str, Any], fields: Iterable[str]) -> Any:
    for name in fields:
        value = record.get(name)
        if value is not None and value != "":
            return value
    return None


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        digits = value.strip().rstrip("%").strip()
        try:
            return int(float(digits))
        except (ValueError, OverflowError):
            return None
    return None


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _required_percentage(value: Any) -> Optional[int]:
    """Percentage may be a scalar or a collection; the lowest threshold qualifies"""
    if isinstance(value, list):
        values = []
        for item in value:
            if isinstance(item, dict):
                item = _first(item, _PERCENTAGE_KEYS)
            number = _to_int(item)
            if number is not None:
                values.append(number)
        return min(values) if values else None
    return _to_int(value)


def _disability_types(value: Any) -> Optional[str]:
    if isinstance(value, list):
        names = []
        for item in value:
            if isinstance(item, dict):
                item = _first(item, _TYPE_NAME_KEYS)
            text = _to_text(item)
            if text and text not in names:
                names.append(text)
        return ", ".join(names) or None
    return _to_text(value)


def normalize_scheme(record: Any) -> Optional[Scheme]:
    """Convert one source record to a Scheme, or None if it has no id/name"""
    if isinstance(record, Scheme):
        return record
    if not isinstance(record, dict):
        return None

    scheme_id = _to_text(_first(record, _ID_FIELDS))
    name = _to_text(_first(record, _NAME_FIELDS))
    if not scheme_id or not name:
        return None

    types = _disability_types(_first(record, _TYPE_FIELDS))
    if types is None:
        # Some sources only carry type names inside the percentage table
        percentages = record.get("tblYojanaDivyangTypePercentages")
        if isinstance(percentages, list):
            types = _disability_types(percentages)

    return Scheme(
        id=scheme_id,
        name=name,
        description=_to_text(_first(record, _DESCRIPTION_FIELDS)),
        min_age=_to_int(_first(record, _MIN_AGE_FIELDS)),
        max_age=_to_int(_first(record, _MAX_AGE_FIELDS)),
        application_deadline=_to_text(_first(record, _DEADLINE_FIELDS)),
        publish_date=_to_text(_first(record, _PUBLISH_DATE_FIELDS)),
        required_disability_percentage=_required_percentage(_first(record, _PERCENTAGE_FIELDS)),
        applicable_disability_types=types,
        publisher=_to_text(_first(record, _PUBLISHER_FIELDS)),
    )


def normalize_schemes(records: Any) -> List[Scheme]:
    if not isinstance(records, list):
        return []
    schemes = []
    for record in records:
        scheme = normalize_scheme(record)
        if scheme is not None:
            schemes.append(scheme)
    return schemes


class SchemeSource(ABC):
    """Provides the current yojana collection; must never raise"""

    @abstractmethod
    async def fetch(self) -> List[Scheme]:
        pass


class StaticSchemeSource(SchemeSource):
    """Serves a fixed table, normalized once"""

    def __init__(self, records: Optional[List[Any]] = None):
        if records is None:
            from .scheme_data import BUNDLED_YOJANAS
            records = BUNDLED_YOJANAS
        self._schemes = normalize_schemes(records)

    async def fetch(self) -> List[Scheme]:
        return list(self._schemes)


class RemoteSchemeSource(SchemeSource):
    """
    Fetches the yojana listing from a remote JSON endpoint on every call.
    Any failure (network, timeout, non-2xx, bad JSON) yields an empty list.
    """

    def __init__(self, url: str, timeout_seconds: float = 10.0):
        self.url = url
        self.timeout_seconds = timeout_seconds

    async def _get_json(self) -> Any:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                self.url,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            ) as response:
                if response.status != 200:
                    raise aiohttp.ClientResponseError(
                        response.request_info,
                        response.history,
                        status=response.status,
                        message="scheme listing request failed"
                    )
                return await response.json(content_type=None)

    async def fetch(self) -> List[Scheme]:
        try:
            data = await self._get_json()
            if not isinstance(data, list):
                logger.warning("Yojana listing from %s is not a JSON array", self.url)
                return []
            return normalize_schemes(data)
        except Exception as e:
            logger.warning("Error fetching yojanas from %s: %s", self.url, e)
            return []


def create_scheme_source_from_settings() -> SchemeSource:
    from ..config import settings

    if settings.scheme_source_url:
        return RemoteSchemeSource(
            url=settings.scheme_source_url,
            timeout_seconds=settings.scheme_source_timeout_seconds
        )
    return StaticSchemeSource()


@dataclass
class SchemeCriteria:
    """Filter criteria; unset fields match every scheme"""
    age: Optional[int] = None
    disability_category: Optional[str] = None
    percentage: Optional[int] = None
    publisher: Optional[str] = None

    @classmethod
    def from_slots(cls, slots: Dict[str, Any], publisher: Optional[str] = None) -> 'SchemeCriteria':
        return cls(
            age=slots.get(SLOT_AGE),
            disability_category=slots.get(SLOT_DISABILITY),
            percentage=slots.get(SLOT_PERCENTAGE),
            publisher=publisher
        )

    def is_empty(self) -> bool:
        return (self.age is None and self.disability_category is None
                and self.percentage is None and self.publisher is None)


def _age_matches(scheme: Scheme, age: int) -> bool:
    if scheme.min_age is not None and age < scheme.min_age:
        return False
    if scheme.max_age is not None and age > scheme.max_age:
        return False
    return True


def _disability_matches(scheme: Scheme, category: str) -> bool:
    types = (scheme.applicable_disability_types or "").strip().lower()
    if not types or types in ALL_DISABILITY_TYPES:
        return True
    wanted = category.strip().lower()
    if wanted in types or types in wanted:
        return True
    # Source type names may be Marathi or Hindi labels for the category
    return mentions_disability(types, wanted)


def _percentage_matches(scheme: Scheme, percentage: int) -> bool:
    required = scheme.required_disability_percentage
    return required is None or percentage >= required


def _publisher_matches(scheme: Scheme, publisher: str) -> bool:
    return (scheme.publisher or "").strip().lower() == publisher.strip().lower()


def scheme_matches(scheme: Scheme, criteria: SchemeCriteria) -> bool:
    if criteria.age is not None and not _age_matches(scheme, criteria.age):
        return False
    if criteria.disability_category and not _disability_matches(scheme, criteria.disability_category):
        return False
    if criteria.percentage is not None and not _percentage_matches(scheme, criteria.percentage):
        return False
    if criteria.publisher and not _publisher_matches(scheme, criteria.publisher):
        return False
    return True


def filter_schemes(schemes: List[Scheme], criteria: SchemeCriteria) -> List[Scheme]:
    return [s for s in schemes if scheme_matches(s, criteria)]


def select_schemes(schemes: List[Scheme],
                   criteria: SchemeCriteria,
                   cap: int = 10,
                   fallback_on_empty: bool = False) -> Tuple[List[Scheme], bool]:
    """
    Filter and cap schemes for the prompt.
    Returns (schemes, used_fallback). With fallback_on_empty, an empty
    match is replaced by the first `cap` unfiltered schemes, trading
    precision for recall.
    """
    matched = filter_schemes(schemes, criteria)
    if not matched and fallback_on_empty and schemes:
        logger.info("No yojana matched %s; falling back to first %d unfiltered", criteria, cap)
        return schemes[:cap], True
    return matched[:cap], False
