"""
Concrete Station Approval - Backend Services
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Station update orchestrator and document issuer
v1.0.0 (2026-09-28): Initial services module
"""
