from pydantic import BaseModel

from schoolcore.models.capability import PermissionSet


class PermissionSetResponse(BaseModel):
    """Resolved grants on one module"""

    can_view: bool
    can_add: bool
    can_edit: bool
    can_delete: bool

    @classmethod
    def from_permissions(cls, permissions: PermissionSet) -> "PermissionSetResponse":
        return cls(
            can_view=permissions.can_view,
            can_add=permissions.can_add,
            can_edit=permissions.can_edit,
            can_delete=permissions.can_delete,
        )


class CascadeSummaryResponse(BaseModel):
    """Counts of dependent records touched by a deactivation or deletion"""

    counts: dict[str, int]
    failed: list[str] = []


class LifecycleResponse(BaseModel):
    """Response after deactivating or deleting an entity"""

    message: str
    id: int
    cascade: CascadeSummaryResponse
