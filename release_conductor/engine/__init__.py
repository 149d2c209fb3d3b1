"""Release orchestration engine.

Key Components:
    - ReleaseOrchestrator: Validates a trigger tag and runs the stages
    - ReleaseContext: Immutable record threaded through the stages
    - ReleaseStage: Base class for pipeline stages

Example:
    >>> from release_conductor.engine.orchestrator import ReleaseOrchestrator
    >>> orchestrator = ReleaseOrchestrator(settings, repository)
    >>> await orchestrator.run("release-v2.4.0")
"""

from release_conductor.engine.context import ReleaseContext

__all__ = ["ReleaseContext"]
