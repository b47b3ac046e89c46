"""Services package — all business logic lives here, never in routers.

Files:
  identifiers.py        — Identifier Resolver: canonical routing key for any vendor-like object
  credential_schema.py  — validation of credential payloads against declared fields
  credential_store.py   — CredentialStore: dual-write / dual-read over document + legacy columns
  credentials.py        — org-facing credential workflow (masking, merge, audit)
  provisioner.py        — per-organization vendor instances by retail vertical and plan limit
  vendor_type.py        — vendor type + retail vertical administration
  vendor_instance.py    — instance lookup by identifier and display edits

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
