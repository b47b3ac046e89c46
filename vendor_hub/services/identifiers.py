"""Vendor identifier resolution — the single source of truth for routing keys.

Every system-internal lookup (handler registry key, credential vault key,
org-scoped API path) must go through :func:`resolve`. Priority, most specific
first:

  1. instance_slug      per-organization instance ("lipseys-2")
  2. vendor_slug        immutable vendor-type slug ("lipseys")
  3. vendor_short_code  legacy signal, emits ``legacy_identifier_fallback``
  4. name               normalized, emits ``legacy_identifier_fallback``

No field at all raises IdentifierUnresolvable; there is no default.

Inputs are loosely typed: ORM objects, pydantic models, or plain dicts using
either snake_case or camelCase keys. Nothing here touches storage.
"""


import re
from collections.abc import Collection, Mapping
from typing import Any

from vendor_hub.core.events import LEGACY_IDENTIFIER_FALLBACK, emit_event
from vendor_hub.core.exceptions import IdentifierUnresolvable, OrganizationRequired

# (attribute, camelCase alias) in resolution order
_PRIORITY: tuple[tuple[str, str], ...] = (
    ("instance_slug", "instanceSlug"),
    ("vendor_slug", "vendorSlug"),
    ("vendor_short_code", "vendorShortCode"),
    ("name", "name"),
)

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
_VALID_SLUG = re.compile(r"^[a-z0-9_-]{1,50}$")


def _text(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def _field(vendor_like: Any, attr: str, alias: str) -> str | None:
    if isinstance(vendor_like, Mapping):
        return _text(vendor_like.get(attr)) or _text(vendor_like.get(alias))
    return _text(getattr(vendor_like, attr, None)) or _text(getattr(vendor_like, alias, None))


def normalize_name(name: str) -> str:
    """Lower-case and replace every character outside [a-z0-9] with '-'.

    Idempotent: normalize_name(normalize_name(x)) == normalize_name(x).
    """
    return _NON_ALNUM.sub("-", name.lower())


def resolve(vendor_like: Any) -> str:
    """Return the canonical identifier for a vendor-like object."""
    if vendor_like is None:
        raise IdentifierUnresolvable(vendor_like)

    instance_slug = _field(vendor_like, "instance_slug", "instanceSlug")
    if instance_slug:
        return instance_slug

    vendor_slug = _field(vendor_like, "vendor_slug", "vendorSlug")
    if vendor_slug:
        return vendor_slug

    short_code = _field(vendor_like, "vendor_short_code", "vendorShortCode")
    if short_code:
        emit_event(
            LEGACY_IDENTIFIER_FALLBACK,
            "Resolved vendor identifier from vendorShortCode; caller has not migrated to slugs",
            source="vendor_short_code",
            identifier=short_code,
        )
        return short_code

    name = _field(vendor_like, "name", "name")
    if name:
        identifier = normalize_name(name)
        emit_event(
            LEGACY_IDENTIFIER_FALLBACK,
            "Resolved vendor identifier from name; vendor is missing slug and short code",
            source="name",
            name=name,
            identifier=identifier,
        )
        return identifier

    raise IdentifierUnresolvable(vendor_like)


def validate(vendor_like: Any) -> bool:
    """Pre-flight check for UI callers: True when resolve() would succeed."""
    if vendor_like is None:
        return False
    return any(_field(vendor_like, attr, alias) for attr, alias in _PRIORITY)


def build_api_path(org_id: Any, vendor_like: Any, endpoint: str) -> str:
    """Compose ``/org/{org_id}/api/vendors/{identifier}/{endpoint}``."""
    if org_id is None or not str(org_id).strip():
        raise OrganizationRequired("Organization is required to build a vendor API path")

    identifier = resolve(vendor_like)
    clean_endpoint = endpoint[1:] if endpoint.startswith("/") else endpoint
    return f"/org/{org_id}/api/vendors/{identifier}/{clean_endpoint}"


# ---------------------------------------------------------------------------
# Slug generation (creation time only, never used to re-derive a stored slug)
# ---------------------------------------------------------------------------

def slugify_vendor_name(name: str) -> str:
    """Derive a vendor-type slug from its display name.

    "Bill Hicks & Co." -> "bill-hicks-co"
    """
    return _NON_ALNUM_RUN.sub("-", name.lower().strip()).strip("-")


def is_valid_vendor_slug(slug: str | None) -> bool:
    return bool(slug) and bool(_VALID_SLUG.match(slug))


def next_instance_slug(vendor_slug: str, taken: Collection[str]) -> str:
    """Return ``vendor_slug`` or the first free ``{vendor_slug}-N`` (N >= 2)."""
    if vendor_slug not in taken:
        return vendor_slug
    counter = 2
    while f"{vendor_slug}-{counter}" in taken:
        counter += 1
    return f"{vendor_slug}-{counter}"
