"""
Services Layer

Scheduling-conflict engine:
- Accept an immutable ScheduleSnapshot (or a Session for lifecycle/commit work)
- Return verdicts and blockers as data, never raise for constraint violations
- Do NOT depend on HTTP request/response objects
- Only blocker_lifecycle and reschedule write to the database
"""
