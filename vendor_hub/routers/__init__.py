"""Routers package — HTTP endpoint definitions.

Files:
  org_vendors.py  — organization-scoped vendor routes (/org/{organization_id}/api/vendors/*)
  v1/             — catalog administration routes (/api/v1/*)
"""
