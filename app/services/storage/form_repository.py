"""
Connected Form Repository - Website forms mapped onto lead fields (connected_forms)
"""

from typing import Any, Dict, List, Optional
import logging

from app.services.storage.base import BaseRepository, new_id, serialize, utcnow

logger = logging.getLogger(__name__)


class ConnectedFormRepository(BaseRepository):
    collection_name = "connected_forms"

    async def list(self, user_id: str) -> List[Dict[str, Any]]:
        """Connected forms of a user, newest first"""
        with self._errors("list forms"):
            rows = await self.collection.find({"user_id": user_id}).sort("created_at", -1).to_list(length=None)
        return [serialize(row) for row in rows]

    async def create(self, form: Dict[str, Any]) -> Dict[str, Any]:
        document = {
            "_id": new_id(),
            **form,
            "created_at": utcnow(),
            "updated_at": utcnow(),
        }
        with self._errors("create form"):
            await self.collection.insert_one(document)
        logger.info(f"Connected form {form.get('form_id')} for {form.get('website_url')}")
        return serialize(document)

    async def delete(self, form_id: str, user_id: str) -> bool:
        with self._errors("delete form"):
            result = await self.collection.delete_one({"_id": form_id, "user_id": user_id})
        return result.deleted_count > 0

    async def find_by_form_id(self, form_id: str) -> Optional[Dict[str, Any]]:
        with self._errors("find form"):
            return serialize(await self.collection.find_one({"form_id": form_id}))

    async def form_ids_for_website(self, user_id: str, website_url: str) -> List[str]:
        with self._errors("list form ids"):
            rows = await self.collection.find(
                {"user_id": user_id, "website_url": website_url},
                {"form_id": 1},
            ).to_list(length=None)
        return [row["form_id"] for row in rows if row.get("form_id")]

    async def websites(self, user_id: str) -> List[str]:
        with self._errors("list websites"):
            return sorted(await self.collection.distinct("website_url", {"user_id": user_id}))
