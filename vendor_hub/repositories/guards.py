"""Pre-update interceptors for repository ``update`` methods.

Routing identifiers (vendor slugs, instance slugs) are frozen at creation. The
guard strips them from any update payload instead of failing the request, so
admin forms that post the whole record keep working; every rejection is
logged as an ``immutable_field_rejected`` event.
"""


import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic.alias_generators import to_camel

from vendor_hub.core.events import IMMUTABLE_FIELD_REJECTED, emit_event

UpdateFn = TypeVar("UpdateFn", bound=Callable[..., Awaitable[Any]])


def immutable_fields(*fields: str) -> Callable[[UpdateFn], UpdateFn]:
    """Decorate ``async def update(self, entity_id, **changes)``.

    Both snake_case and camelCase spellings of each field are dropped.
    """
    spellings = {field: {field, to_camel(field)} for field in fields}

    def decorator(update_fn: UpdateFn) -> UpdateFn:
        @functools.wraps(update_fn)
        async def wrapper(self, entity_id, **changes):
            for field, keys in spellings.items():
                for key in keys & changes.keys():
                    rejected = changes.pop(key)
                    emit_event(
                        IMMUTABLE_FIELD_REJECTED,
                        f"Ignored update to immutable field '{field}'",
                        entity=self.model.__tablename__,
                        entity_id=entity_id,
                        field=field,
                        rejected_value=rejected,
                    )
            return await update_fn(self, entity_id, **changes)

        return wrapper  # type: ignore[return-value]

    return decorator
