"""
Minimal PostgREST client for the hosted Supabase backend.

Auth headers:
- apikey: <service role key>
- Authorization: Bearer <service role key>
"""
import json
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode
import requests
import structlog

from config.settings import get_settings, ConfigurationError

logger = structlog.get_logger()
settings = get_settings()

Filter = Tuple[str, str, Any]  # (column, op, value), op in eq/neq/gt/gte/lt/lte/in

UPSERT_CHUNK_SIZE = 500


class SupabaseError(RuntimeError):
    """A PostgREST call returned an error status."""

    def __init__(self, operation: str, table: str, status_code: int, body: str):
        super().__init__(f"Supabase {operation} failed ({table}): {status_code} {body}")
        self.operation = operation
        self.table = table
        self.status_code = status_code


class SupabaseStore:
    """Table-level access to the hosted database."""

    def __init__(self, url: str, key: str, schema: str = "public", timeout: int = 60):
        if not url or not key:
            raise ConfigurationError("Supabase environment variables not set.")
        self.url = url.rstrip("/")
        self.key = key
        self.schema = schema
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "SupabaseStore":
        return cls(
            settings.supabase_url,
            settings.supabase_service_role_key,
            schema=settings.supabase_schema,
        )

    @property
    def rest_base(self) -> str:
        return f"{self.url}/rest/v1"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Accept-Profile": self.schema,
            "Content-Profile": self.schema,
        }
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _format_filter(column: str, op: str, value: Any) -> Tuple[str, str]:
        if op == "in":
            if not isinstance(value, (list, tuple, set)):
                raise ValueError("in filter requires a list/tuple/set value")
            return column, f"in.({','.join(str(v) for v in value)})"
        return column, f"{op}.{value}"

    def _url(self, table: str, **params) -> str:
        filters = params.pop("filters", None) or []
        query = {k: v for k, v in params.items() if v is not None}
        for column, op, value in filters:
            key, formatted = self._format_filter(column, op, value)
            query[key] = formatted
        url = f"{self.rest_base}/{table}"
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    def _check(self, response: requests.Response, operation: str, table: str) -> None:
        if response.status_code >= 400:
            logger.error("supabase_request_failed", operation=operation, table=table,
                         status=response.status_code)
            raise SupabaseError(operation, table, response.status_code, response.text)

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[List[Filter]] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[dict]:
        url = self._url(table, select=columns, order=order, limit=limit, filters=filters)
        response = requests.get(url, headers=self._headers(), timeout=self.timeout)
        self._check(response, "select", table)
        return response.json() if response.text else []

    def upsert(self, table: str, rows: Union[dict, List[dict]], on_conflict: str) -> int:
        """Upsert rows, merging duplicates on the conflict target.

        Returns:
            Number of rows sent
        """
        rows = rows if isinstance(rows, list) else [rows]
        url = self._url(table, on_conflict=on_conflict)
        headers = self._headers({"Prefer": "resolution=merge-duplicates,return=minimal"})

        for start in range(0, len(rows), UPSERT_CHUNK_SIZE):
            chunk = rows[start:start + UPSERT_CHUNK_SIZE]
            response = requests.post(url, headers=headers, data=json.dumps(chunk), timeout=self.timeout)
            self._check(response, "upsert", table)

        logger.debug("supabase_upserted", table=table, count=len(rows))
        return len(rows)

    def insert(self, table: str, rows: List[dict]) -> int:
        if not rows:
            return 0
        url = self._url(table)
        headers = self._headers({"Prefer": "return=minimal"})
        response = requests.post(url, headers=headers, data=json.dumps(rows), timeout=self.timeout)
        self._check(response, "insert", table)
        return len(rows)

    def delete(self, table: str, filters: List[Filter]) -> None:
        if not filters:
            raise ValueError("delete requires at least one filter")
        url = self._url(table, filters=filters)
        headers = self._headers({"Prefer": "return=minimal"})
        response = requests.delete(url, headers=headers, timeout=self.timeout)
        self._check(response, "delete", table)
