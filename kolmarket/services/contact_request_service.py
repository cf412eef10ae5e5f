"""
Contact Request Service - store operations for kol_contact_requests.

A contact request records that a business asked us to reach a KOL about one
of its campaigns. There is at most one row per (campaign_id, kol_id):

    in_progress  --withdraw-->  withdrawn
         ^                          |
         +--------- intake ---------+   (a fresh intake always resets)

Outside HTTP the pair is the key. The "campaignId:kolId" string form only
exists at the API boundary (response "id" field, withdraw path parameter).

Every method raises SQLAlchemyError on storage failure. Whether that reaches
the caller is the route's decision (see degrade_on_storage_error).
"""

from typing import Optional, List, NamedTuple

from sqlalchemy import text

from kolmarket.db.postgres import get_db_session, execute_raw_sql
from kolmarket.schemas.schemas import ContactRequestStatus
from kolmarket.utils.clock import utc_now

KEY_DELIMITER = ":"

COLUMNS = (
    "campaign_id, kol_id, campaign_title, requester_id, kol_handle, "
    "kol_display_name, status, requested_at, withdrawn_at"
)


class ContactRequestKey(NamedTuple):
    campaign_id: str
    kol_id: str

    @property
    def id(self) -> str:
        return f"{self.campaign_id}{KEY_DELIMITER}{self.kol_id}"

    @classmethod
    def parse(cls, value: str) -> Optional["ContactRequestKey"]:
        """Split "campaignId:kolId". None when either half is missing."""
        campaign_id, sep, kol_id = value.partition(KEY_DELIMITER)
        if not sep or not campaign_id or not kol_id:
            return None
        return cls(campaign_id, kol_id)


def _with_id(row: dict) -> dict:
    row["id"] = ContactRequestKey(row["campaign_id"], row["kol_id"]).id
    return row


class ContactRequestService:
    """
    Handles contact request persistence.
    Title, handle and display name are snapshots taken at request time.
    """

    def upsert(self, record: dict) -> None:
        """
        Insert a request or fully overwrite the one with the same key.

        Args:
            record: campaign_id, kol_id, requester_id (required) plus
                campaign_title, kol_handle, kol_display_name, requested_at

        Overwriting resets status to in_progress and clears withdrawn_at,
        so an earlier withdrawal does not survive a new request.
        """
        params = {
            "campaign_id": record["campaign_id"],
            "kol_id": record["kol_id"],
            "requester_id": record["requester_id"],
            "campaign_title": record.get("campaign_title"),
            "kol_handle": record.get("kol_handle"),
            "kol_display_name": record.get("kol_display_name"),
            "status": ContactRequestStatus.in_progress.value,
            "requested_at": record.get("requested_at") or utc_now(),
        }
        with get_db_session() as db:
            db.execute(
                text("""
                    INSERT INTO kol_contact_requests (campaign_id, kol_id, campaign_title, requester_id,
                        kol_handle, kol_display_name, status, requested_at, withdrawn_at)
                    VALUES (:campaign_id, :kol_id, :campaign_title, :requester_id,
                        :kol_handle, :kol_display_name, :status, :requested_at, NULL)
                    ON CONFLICT (campaign_id, kol_id) DO UPDATE SET
                        campaign_title = EXCLUDED.campaign_title,
                        requester_id = EXCLUDED.requester_id,
                        kol_handle = EXCLUDED.kol_handle,
                        kol_display_name = EXCLUDED.kol_display_name,
                        status = EXCLUDED.status,
                        requested_at = EXCLUDED.requested_at,
                        withdrawn_at = NULL
                """),
                params
            )

    def list_by_filter(self, requester_id: Optional[str] = None,
                       campaign_id: Optional[str] = None) -> List[dict]:
        """Non-withdrawn requests matching every given filter, newest first."""
        sql = f"SELECT {COLUMNS} FROM kol_contact_requests WHERE status != :withdrawn"
        params = {"withdrawn": ContactRequestStatus.withdrawn.value}

        if campaign_id:
            sql += " AND campaign_id = :campaign_id"
            params["campaign_id"] = campaign_id
        if requester_id:
            sql += " AND requester_id = :requester_id"
            params["requester_id"] = requester_id

        sql += " ORDER BY requested_at DESC"
        return [_with_id(r) for r in execute_raw_sql(sql, params)]

    def get(self, key: ContactRequestKey) -> Optional[dict]:
        """Fetch one request regardless of status."""
        rows = execute_raw_sql(
            f"SELECT {COLUMNS} FROM kol_contact_requests WHERE campaign_id = :cid AND kol_id = :kid",
            {"cid": key.campaign_id, "kid": key.kol_id}
        )
        return _with_id(rows[0]) if rows else None

    def update_status_to_withdrawn(self, key: ContactRequestKey,
                                   withdrawn_at: Optional[str] = None) -> bool:
        """
        Mark a request withdrawn.

        Returns True if a row changed. Already-withdrawn and unknown keys
        change nothing and return False; neither is an error.
        """
        with get_db_session() as db:
            result = db.execute(
                text("""
                    UPDATE kol_contact_requests SET status = :withdrawn, withdrawn_at = :withdrawn_at
                    WHERE campaign_id = :cid AND kol_id = :kid AND status != :withdrawn
                """),
                {
                    "withdrawn": ContactRequestStatus.withdrawn.value,
                    "withdrawn_at": withdrawn_at or utc_now(),
                    "cid": key.campaign_id,
                    "kid": key.kol_id,
                }
            )
            return result.rowcount > 0


def get_contact_request_service() -> ContactRequestService:
    """Get contact request service instance."""
    return ContactRequestService()
