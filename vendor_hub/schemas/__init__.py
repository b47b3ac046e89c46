"""Pydantic schemas package.

Folder intent:
  common.py      — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  vendor.py      — vendor types, retail verticals, vendor instances
  credential.py  — declared credential fields + credential request/response DTOs
"""
