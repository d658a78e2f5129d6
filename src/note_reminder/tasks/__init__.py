"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskState) and task identity
- task_parser.py: marker extraction from document text
- task_cache.py: per-document in-memory cache with a deduplicated union view
- notified_store.py: JSON-backed set of tasks that already fired (+ settings record)
- task_scheduler.py: polling evaluator that fires due tasks at most once
- task_api.py: small high-level helpers used by the rest of the app
"""
