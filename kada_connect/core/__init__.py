"""Core Business Logic Module

This module provides the reference-data and profile logic of KADA Connect,
independent of the HTTP layer.

Architecture:
    - Pure Python (no Flask dependencies in core logic)
    - Testable without HTTP mocking
    - Collaborators (cache, profile store) are owned instances, never globals

Module Structure:
    - reference_data.py : Static reference collections and the ReferenceCatalog
    - matching.py       : Search ranking (exact, prefix, substring)
    - cache.py          : LookupCache, TTL cache for derived views
    - lookup_service.py : List/search/suggest/validate/popularity operations
    - profiles.py       : In-memory company and student store
    - rbac.py           : Static role -> permission table and checks
    - url_helper.py     : Image URL rewriting to the proxy endpoint
    - validators.py     : Input validation (query params, profile payloads)
    - errors.py         : ApiError hierarchy rendered by the API layer

Usage Pattern:
    Import explicitly when needed:
        from kada_connect.core.lookup_service import LookupService, build_lookup_service
        from kada_connect.core.rbac import check_permission, has_permission
        from kada_connect.core.url_helper import convert_to_proxy_url
"""
