"""
In-memory OTP store keyed by (phone, role)
"""
import threading
from datetime import datetime
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel


class UserRole(str, Enum):
    APPLICANT = "applicant"
    RECRUITER = "recruiter"


class OtpKey(NamedTuple):
    phone: str
    role: UserRole


class OtpRecord(BaseModel):
    code: str
    expires_at: datetime
    attempts: int = 0


class OtpStore:
    """
    Process-local table of pending OTP records.

    Holds at most one record per key. Records handed out by get() and scan()
    are copies, so callers must put() a record back to change it.
    """

    def __init__(self):
        self._records: Dict[OtpKey, OtpRecord] = {}
        self._mutex = threading.Lock()

    def put(self, key: OtpKey, record: OtpRecord) -> None:
        with self._mutex:
            self._records[key] = record.model_copy()

    def get(self, key: OtpKey) -> Optional[OtpRecord]:
        with self._mutex:
            record = self._records.get(key)
            return record.model_copy() if record is not None else None

    def remove(self, key: OtpKey) -> None:
        with self._mutex:
            self._records.pop(key, None)

    def remove_if_expired(self, key: OtpKey, now: datetime) -> bool:
        """Delete the record only if the live one (not a snapshot) has expired"""
        with self._mutex:
            record = self._records.get(key)
            if record is None or not now > record.expires_at:
                return False
            del self._records[key]
            return True

    def scan(self) -> List[Tuple[OtpKey, OtpRecord]]:
        with self._mutex:
            return [(key, record.model_copy()) for key, record in self._records.items()]

    def __len__(self) -> int:
        with self._mutex:
            return len(self._records)

    def __contains__(self, key: OtpKey) -> bool:
        with self._mutex:
            return key in self._records
