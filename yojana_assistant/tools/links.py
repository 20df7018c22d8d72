"""
Portal Link Catalog
The only URLs the assistant is ever allowed to return
"""
from typing import Any, Dict, Iterable, List

from ..schemas import Link


LOGIN_LINK = Link(
    label="Login to Divyang Portal",
    url="https://divyangparbhani.altwise.in/home/login"
)

REGISTER_LINK = Link(
    label="Register on Divyang Portal",
    url="https://divyangparbhani.altwise.in/home/newregistration"
)

LINK_CATALOG: List[Link] = [LOGIN_LINK, REGISTER_LINK]


def catalog_as_dicts() -> List[Dict[str, str]]:
    return [link.model_dump() for link in LINK_CATALOG]


def sanitize_links(candidates: Any, catalog: Iterable[Link] = LINK_CATALOG) -> List[Link]:
    """
    Keep only links whose URL exactly matches a catalog entry.
    Anything else the model proposed is dropped silently.
    """
    known = {link.url: link for link in catalog}
    if not isinstance(candidates, list):
        return []

    result: List[Link] = []
    seen = set()
    for candidate in candidates:
        if isinstance(candidate, Link):
            url = candidate.url
        elif isinstance(candidate, dict):
            url = candidate.get("url")
        else:
            continue

        if isinstance(url, str) and url in known and url not in seen:
            seen.add(url)
            result.append(known[url])

    return result
