"""Job orchestration.

- dz_job: synchronous job runner (status marker, scratch workspace, stages)
- dz_pipeline: Durable Functions orchestrator that runs the job detached
"""
