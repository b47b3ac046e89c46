"""v1 router package — catalog administration endpoints under /api/v1/*.

Files:
  vendor_types.py      — supported vendor types (slug assigned once at creation)
  retail_verticals.py  — retail vertical tags used for provisioning

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to vendor_hub/services/.
"""
