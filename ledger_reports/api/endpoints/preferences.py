"""
Preference endpoints: the organization label remembered for PDF exports.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ledger_reports.api.state import get_preference_store
from ledger_reports.common.preferences import PreferenceStore

router = APIRouter()


class OrganizationLabel(BaseModel):
    organization_label: str = ""


@router.get("/organization-label")
def get_organization_label(store: PreferenceStore = Depends(get_preference_store)):
    return {"organization_label": store.get_organization_label()}


@router.put("/organization-label")
def put_organization_label(payload: OrganizationLabel, store: PreferenceStore = Depends(get_preference_store)):
    """Store the label; a blank label leaves the previous one in place."""
    stored = store.remember_organization_label(payload.organization_label)
    return {"organization_label": store.get_organization_label(), "stored": stored}
