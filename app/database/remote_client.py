"""
Thin wrapper over the supabase-py query builder.

Every call is a single round trip against one table. There is no
transaction spanning several tables; callers that need more than one
write have to deal with partial failure themselves.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from supabase import Client

logger = logging.getLogger(__name__)


class RemoteDataError(Exception):
    """A transport failure or a backend-reported query error."""

    def __init__(self, table: str, operation: str, message: str):
        self.table = table
        self.operation = operation
        self.message = message
        super().__init__(f"{operation} on '{table}' failed: {message}")


class TableQuery:
    """Declarative description of one read issued by fetch_all."""

    def __init__(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ):
        self.table = table
        self.columns = columns
        self.filters = filters or {}
        self.order_by = order_by
        self.desc = desc
        self.limit = limit


class RemoteDataClient:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Read rows from a table, optionally filtered by equality, ordered and limited."""
        try:
            query = self.supabase.table(table).select(columns)
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit is not None:
                query = query.limit(limit)
            result = query.execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error selecting from {table}: {e}")
            raise RemoteDataError(table, "select", str(e)) from e

    def run(self, query: TableQuery) -> List[Dict[str, Any]]:
        return self.select(
            query.table,
            columns=query.columns,
            filters=query.filters,
            order_by=query.order_by,
            desc=query.desc,
            limit=query.limit,
        )

    async def fetch_all(self, queries: List[TableQuery]) -> Dict[str, List[Dict[str, Any]]]:
        """Issue one read per query concurrently and wait for all of them.

        All-or-nothing: if any read fails the whole load raises the first
        RemoteDataError and no partial mapping is returned.
        """
        results = await asyncio.gather(
            *(asyncio.to_thread(self.run, q) for q in queries)
        )
        return {q.table: rows for q, rows in zip(queries, results)}

    def upsert(
        self,
        table: str,
        record: Mapping[str, Any],
        on_conflict: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        try:
            if on_conflict:
                query = self.supabase.table(table).upsert(dict(record), on_conflict=on_conflict)
            else:
                query = self.supabase.table(table).upsert(dict(record))
            result = query.execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error upserting into {table}: {e}")
            raise RemoteDataError(table, "upsert", str(e)) from e

    def update(
        self,
        table: str,
        match_column: str,
        match_value: Any,
        patch: Mapping[str, Any],
    ) -> List[Dict[str, Any]]:
        """Update rows where match_column = match_value. Returns the updated rows."""
        try:
            result = self.supabase.table(table)\
                .update(dict(patch))\
                .eq(match_column, match_value)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error updating {table} where {match_column}={match_value}: {e}")
            raise RemoteDataError(table, "update", str(e)) from e

    def delete(self, table: str, match_column: str, match_value: Any) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table(table)\
                .delete()\
                .eq(match_column, match_value)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error deleting from {table} where {match_column}={match_value}: {e}")
            raise RemoteDataError(table, "delete", str(e)) from e
