"""
Ad Account Repository - Connected advertising and Search Console accounts (ad_accounts)
"""

from typing import Any, Dict, List, Optional
import logging

from app.services.storage.base import BaseRepository, serialize, utcnow
from app.utils.error_handlers import ValidationError

logger = logging.getLogger(__name__)


class AdAccountRepository(BaseRepository):
    collection_name = "ad_accounts"

    async def list(self, user_id: str, platform: Optional[str] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"user_id": user_id}
        if platform:
            query["platform"] = platform
        with self._errors("list accounts"):
            rows = await self.collection.find(query).sort("account_name", 1).to_list(length=None)
        return [serialize(row) for row in rows]

    async def upsert(
        self,
        user_id: str,
        platform: str,
        account_id: str,
        account_name: str
    ) -> None:
        with self._errors("store account"):
            await self.collection.update_one(
                {"user_id": user_id, "platform": platform, "account_id": account_id},
                {
                    "$set": {"account_name": account_name, "updated_at": utcnow()},
                    "$setOnInsert": {"is_selected": False, "created_at": utcnow()},
                },
                upsert=True,
            )

    async def sync(self, user_id: str, platform: str, accounts: List[Dict[str, str]]) -> int:
        """Upsert every account; one failing row does not stop the rest"""
        stored = 0
        for account in accounts:
            try:
                await self.upsert(user_id, platform, account["account_id"], account["account_name"])
                stored += 1
            except Exception as e:
                logger.error(f"Error storing account {account.get('account_id')}: {str(e)}")
        logger.info(f"Stored {stored} of {len(accounts)} {platform} accounts for user {user_id}")
        return stored

    async def select(self, user_id: str, platform: str, account_id: str) -> Dict[str, Any]:
        """Mark one account selected and clear the flag on the others"""
        with self._errors("select account"):
            account = await self.collection.find_one(
                {"user_id": user_id, "platform": platform, "account_id": account_id}
            )
            if account is None:
                raise ValidationError(f"Account {account_id} is not connected")

            await self.collection.update_many(
                {"user_id": user_id, "platform": platform},
                {"$set": {"is_selected": False}},
            )
            await self.collection.update_one(
                {"_id": account["_id"]},
                {"$set": {"is_selected": True, "updated_at": utcnow()}},
            )

        account["is_selected"] = True
        return serialize(account)
