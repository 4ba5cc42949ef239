"""
DuckDB-based term index for quad token fields.

This module implements a small reference index that stores the postings
of encoded records in DuckDB and evaluates the weighted boolean queries
built by the query builder with a single SQL statement.
"""

from typing import List, Optional, Tuple
import logging

import duckdb

from .encoder import FieldSet
from .query import Query


logger = logging.getLogger(__name__)


class DuckDBTermIndex:
    """
    Term index backed by a DuckDB postings table.

    Each posting is a (doc_id, field, term) row. A query clause matches a
    document when any of its terms is posted in the clause's field, and a
    document's score is the sum of the boosts of its matching clauses.
    """

    def __init__(self, database: str = ":memory:"):
        """
        Initialize the index.

        Args:
            database: DuckDB database path (in-memory by default)
        """
        self._con = duckdb.connect(database)
        self._con.execute("""
            CREATE TABLE IF NOT EXISTS postings (
                doc_id VARCHAR NOT NULL,
                field VARCHAR NOT NULL,
                term VARCHAR NOT NULL
            )
        """)
        logger.info("Opened term index at %s", database)

    def add(self, doc_id: str, fields: FieldSet) -> int:
        """
        Index the fields of one record.

        Args:
            doc_id: Document identifier
            fields: Encoded fields of the document

        Returns:
            Number of postings written
        """
        rows = [
            (doc_id, name, term)
            for name, terms in fields.fields().items()
            for term in terms
        ]
        if rows:
            self._con.executemany("INSERT INTO postings VALUES (?, ?, ?)", rows)
        logger.debug("Indexed %s with %d postings", doc_id, len(rows))
        return len(rows)

    def delete(self, doc_id: str) -> None:
        """Remove every posting of a document."""
        self._con.execute("DELETE FROM postings WHERE doc_id = ?", [doc_id])

    def count(self) -> int:
        """Number of distinct indexed documents."""
        return self._con.execute(
            "SELECT COUNT(DISTINCT doc_id) FROM postings"
        ).fetchone()[0]

    def terms(self, doc_id: str, field: str) -> List[str]:
        """Sorted terms posted for a document in a field."""
        rows = self._con.execute(
            "SELECT DISTINCT term FROM postings WHERE doc_id = ? AND field = ? ORDER BY term",
            [doc_id, field],
        ).fetchall()
        return [row[0] for row in rows]

    def search(self, query: Query, limit: Optional[int] = None) -> List[Tuple[str, float]]:
        """
        Evaluate a query.

        Args:
            query: Query built by the query builder
            limit: Maximum number of hits (all if None)

        Returns:
            List of (doc_id, score), best score first, ties by doc_id
        """
        if not query.clauses:
            return []

        params: list = []
        values = []
        for idx, clause in enumerate(query.clauses):
            for term in clause.terms:
                values.append(
                    "(CAST(? AS INTEGER), CAST(? AS VARCHAR), CAST(? AS VARCHAR), CAST(? AS DOUBLE))"
                )
                params.extend([idx, clause.field, term, clause.boost])
        values_list = ", ".join(values)

        # Each clause counts once per document, however many terms hit
        sql = f"""
            WITH clauses AS (
                SELECT col0 AS idx, col1 AS field, col2 AS term, col3 AS boost
                FROM (VALUES {values_list})
            ),
            hits AS (
                SELECT DISTINCT p.doc_id, c.idx, c.boost
                FROM postings p
                JOIN clauses c ON p.field = c.field AND p.term = c.term
            )
            SELECT doc_id, SUM(boost) AS score
            FROM hits
            GROUP BY doc_id
            ORDER BY score DESC, doc_id
        """
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        results = self._con.execute(sql, params).fetchall()
        return [(doc_id, float(score)) for doc_id, score in results]

    def close(self) -> None:
        """Close the database connection."""
        if getattr(self, "_con", None):
            self._con.close()
            self._con = None

    def __del__(self):
        """Cleanup on garbage collection."""
        self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
