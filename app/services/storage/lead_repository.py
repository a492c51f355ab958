"""
Lead Repository - Leads captured from connected website forms (leads)
"""

from typing import Any, Dict, List, Optional
import logging

from app.services.storage.base import BaseRepository, new_id, serialize, utcnow
from app.services.storage.form_repository import ConnectedFormRepository

logger = logging.getLogger(__name__)

ALL = "All"
UNASSIGNED = "Unassigned"
LEAD_STATUSES = ["New", "Contacted", "Qualified", "Follow-up", "Not Reachable", "Converted", "Lost"]


def build_lead_filter(
    user_id: str,
    status: Optional[str] = None,
    assigned_to: Optional[str] = None,
    form_ids: Optional[List[str]] = None
) -> Dict[str, Any]:
    """
    Mongo filter for the lead table

    "All" or an empty value disables a filter; "Unassigned" matches leads
    with no assignee.
    """
    query: Dict[str, Any] = {"user_id": user_id}
    if status and status != ALL:
        query["status"] = status
    if assigned_to and assigned_to != ALL:
        if assigned_to == UNASSIGNED:
            query["assigned_to"] = {"$in": [None, ""]}
        else:
            query["assigned_to"] = assigned_to
    if form_ids is not None:
        query["form_id"] = {"$in": form_ids}
    return query


class LeadRepository(BaseRepository):
    collection_name = "leads"

    def __init__(self, db, forms: Optional[ConnectedFormRepository] = None):
        super().__init__(db)
        self.forms = forms or ConnectedFormRepository(db)

    async def list(
        self,
        user_id: str,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        website: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Leads of a user, newest first

        A website filter keeps leads whose form is connected to that website;
        a website with no connected forms has no leads.
        """
        form_ids = None
        if website and website != ALL:
            form_ids = await self.forms.form_ids_for_website(user_id, website)
            if not form_ids:
                return []

        query = build_lead_filter(user_id, status, assigned_to, form_ids)
        with self._errors("list leads"):
            rows = await self.collection.find(query).sort("created_at", -1).to_list(length=None)
        return [serialize(row) for row in rows]

    async def get(self, lead_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        with self._errors("read lead"):
            return serialize(await self.collection.find_one({"_id": lead_id, "user_id": user_id}))

    async def create(self, lead: Dict[str, Any]) -> Dict[str, Any]:
        document = {
            "_id": new_id(),
            "status": "New",
            "assigned_to": None,
            "remarks": None,
            **lead,
            "created_at": utcnow(),
            "updated_at": utcnow(),
        }
        with self._errors("create lead"):
            await self.collection.insert_one(document)
        return serialize(document)

    async def update(self, lead_id: str, user_id: str, changes: Dict[str, Any]) -> bool:
        """
        Update status, assignee or remarks of a lead owned by the user

        An empty assignee clears the assignment.
        """
        update = {}
        if "status" in changes and changes["status"] is not None:
            update["status"] = changes["status"]
        if "assigned_to" in changes:
            update["assigned_to"] = changes["assigned_to"] or None
        if "remarks" in changes and changes["remarks"] is not None:
            update["remarks"] = changes["remarks"]
        if not update:
            return False

        update["updated_at"] = utcnow()
        with self._errors("update lead"):
            result = await self.collection.update_one(
                {"_id": lead_id, "user_id": user_id}, {"$set": update}
            )
        return result.matched_count > 0

    async def delete(self, lead_id: str, user_id: str) -> bool:
        with self._errors("delete lead"):
            result = await self.collection.delete_one({"_id": lead_id, "user_id": user_id})
        return result.deleted_count > 0

    async def stats(self, user_id: str) -> Dict[str, Any]:
        """Total, per-status and unassigned lead counts"""
        pipeline = [
            {"$match": {"user_id": user_id}},
            {"$group": {"_id": "$status", "count": {"$sum": 1}}},
        ]
        with self._errors("compute lead stats"):
            groups = await self.collection.aggregate(pipeline).to_list(length=None)
            unassigned = await self.collection.count_documents(
                build_lead_filter(user_id, assigned_to=UNASSIGNED)
            )

        by_status = {status: 0 for status in LEAD_STATUSES}
        for group in groups:
            by_status[group["_id"] or "New"] = by_status.get(group["_id"] or "New", 0) + group["count"]

        return {
            "total": sum(group["count"] for group in groups),
            "by_status": by_status,
            "unassigned": unassigned,
        }
