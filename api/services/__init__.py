"""Service layer for business logic.

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)

The scoring core (calendar_service, quota_service, streaks_service,
battle_score_service and build_leaderboard) is pure: plain inputs in,
frozen dataclasses out, "today" always passed in. The remaining services
fetch through repositories and hand the rows to that core.

Services should:
- Contain all business rules and validation
- Raise domain exceptions that routes map to HTTP status codes
- Return dataclasses or ORM rows (routes do the schema conversion)

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
"""
