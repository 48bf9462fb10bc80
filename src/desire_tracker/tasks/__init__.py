"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Step, Category, StepSource)
- task_store.py: in-memory collection + mutation/filter API
- task_codec.py: JSON wire format for the whole collection
- assist.py: keyword-matched checklist templates
"""
