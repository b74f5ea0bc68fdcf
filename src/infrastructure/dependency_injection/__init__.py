from .identity_dependencies import get_identity_orchestrator

__all__ = ["get_identity_orchestrator"]
