"""Application layer - services, use cases, interfaces, and DTOs.

Import from the subpackages directly; this package stays import-light so
adapters can depend on ``core.application.interfaces`` without pulling in
the services.
"""
