from .owner_index import OwnerIndex, OwnerKind
from .alpine import Alpine, ReconcileResult

__all__ = ["Alpine", "ReconcileResult", "OwnerIndex", "OwnerKind"]
