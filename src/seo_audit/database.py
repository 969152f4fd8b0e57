# src/seo_audit/database.py
"""Database abstraction layer for tracked sites, audits and sprint requests."""

import json
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List, Dict, Any
import logging

from seo_audit.config import settings

logger = logging.getLogger(__name__)

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS sites (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    organization_id TEXT NOT NULL,
    domain TEXT NOT NULL,
    url TEXT,
    business_name TEXT,
    address TEXT,
    city TEXT,
    state TEXT,
    zip TEXT,
    phone TEXT,
    industry TEXT DEFAULT 'other',
    stage TEXT DEFAULT 'lead',
    notes TEXT,
    follow_up_date TEXT,
    data_confidence_source TEXT DEFAULT 'detected',

    -- Latest audit summary
    latest_score INTEGER,
    latest_audit_id INTEGER,
    latest_audit_at TEXT,
    platform_detected TEXT,
    platform_confidence REAL,
    directory_readiness TEXT,

    created_at TEXT NOT NULL,
    updated_at TEXT,

    UNIQUE(organization_id, domain)
);

CREATE TABLE IF NOT EXISTS audits (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    site_id INTEGER NOT NULL REFERENCES sites(id) ON DELETE CASCADE,
    domain TEXT NOT NULL,
    url TEXT,
    audit_date TEXT NOT NULL,
    relay TEXT,

    total_score INTEGER,
    max_score INTEGER,

    platform_name TEXT,
    platform_confidence REAL,
    platform_fixability TEXT,
    platform_note TEXT,

    readiness_tier TEXT,
    readiness_percentage INTEGER,
    readiness_passed INTEGER,
    readiness_total INTEGER,

    -- JSON payloads
    checks_json TEXT,
    categories_json TEXT,
    requirements_json TEXT,
    blockers_json TEXT,
    quick_wins_json TEXT,
    top_issues_json TEXT,

    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS sprint_requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    site_id INTEGER REFERENCES sites(id) ON DELETE SET NULL,
    organization_id TEXT NOT NULL,
    email TEXT,
    phone TEXT,
    readiness_tier TEXT,
    blockers_json TEXT,
    created_at TEXT NOT NULL
);
"""

SITE_COLUMNS = (
    'organization_id', 'domain', 'url', 'business_name', 'address', 'city',
    'state', 'zip', 'phone', 'industry', 'stage', 'notes', 'follow_up_date',
    'data_confidence_source',
)

# Fields a caller may change on an existing site
MUTABLE_SITE_FIELDS = ('industry', 'stage', 'notes', 'follow_up_date')

# Latest-audit summary columns maintained by insert_audit
SITE_CACHE_FIELDS = (
    'latest_score', 'latest_audit_id', 'latest_audit_at', 'platform_detected',
    'platform_confidence', 'directory_readiness',
)


def _now() -> str:
    return datetime.now().isoformat()


class AbstractDatabase(ABC):
    """Abstract base class defining the storage interface."""

    @abstractmethod
    def connect(self) -> None:
        """Establish database connection."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close database connection."""
        pass

    @abstractmethod
    def create_schema(self) -> None:
        """Create the necessary database tables."""
        pass

    @abstractmethod
    def list_sites(self, organization_id: str) -> List[Dict[str, Any]]:
        """List an organization's sites, newest first."""
        pass

    @abstractmethod
    def get_site(self, site_id: int) -> Optional[Dict[str, Any]]:
        """Fetch one site by id."""
        pass

    @abstractmethod
    def insert_site(self, site: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a site record.

        Args:
            site: Site fields. Must include 'organization_id' and 'domain'.

        Returns:
            The stored row, including its id and created_at.
        """
        pass

    @abstractmethod
    def update_site(self, site_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update a site's mutable fields and stamp updated_at.

        Returns:
            The updated row, or None if the site does not exist.
        """
        pass

    @abstractmethod
    def delete_site(self, site_id: int) -> bool:
        """Delete a site. Returns True if a row was removed."""
        pass

    @abstractmethod
    def insert_audit(self, site_id: int, audit: Dict[str, Any]) -> int:
        """Store an audit for a site and cache its summary on the site.

        Args:
            site_id: Owning site
            audit: Audit payload as produced by AuditResult.to_dict()

        Returns:
            The new audit id.
        """
        pass

    @abstractmethod
    def get_latest_audit(self, site_id: int) -> Optional[Dict[str, Any]]:
        """Most recent stored audit of a site, as an audit payload dict."""
        pass

    @abstractmethod
    def insert_sprint_request(self, request: Dict[str, Any]) -> int:
        """Store a sprint request. Returns the new id."""
        pass


class LocalSqliteDatabase(AbstractDatabase):
    """SQLite database implementation for local storage."""

    def __init__(self, db_url: Optional[str] = None):
        """Initialize local SQLite database.

        Args:
            db_url: Database URL (sqlite:///path/to/db.db). Defaults to settings.DATABASE_URL.
        """
        self.db_url = db_url or settings.DATABASE_URL
        self.db_path = self.db_url.replace("sqlite:///", "")
        self.conn: Optional[sqlite3.Connection] = None
        self.connect()
        self.create_schema()

    def connect(self) -> None:
        """Establish SQLite connection."""
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        logger.debug(f"Connected to local SQLite database: {self.db_path}")

    def close(self) -> None:
        """Close SQLite connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Closed local SQLite connection")

    def create_schema(self) -> None:
        """Create the tables if they don't exist."""
        with self.conn:
            self.conn.executescript(CREATE_TABLES_SQL)
        logger.debug("Schema verified/created for local SQLite")

    def list_sites(self, organization_id: str) -> List[Dict[str, Any]]:
        cursor = self.conn.execute(
            "SELECT * FROM sites WHERE organization_id = ? ORDER BY created_at DESC, id DESC",
            (organization_id,),
        )
        return [dict(row) for row in cursor.fetchall()]

    def get_site(self, site_id: int) -> Optional[Dict[str, Any]]:
        row = self.conn.execute("SELECT * FROM sites WHERE id = ?", (site_id,)).fetchone()
        return dict(row) if row else None

    def insert_site(self, site: Dict[str, Any]) -> Dict[str, Any]:
        if not site.get('domain') or not site.get('organization_id'):
            raise ValueError("The 'domain' and 'organization_id' fields are required.")

        values = {k: v for k, v in site.items() if k in SITE_COLUMNS}
        values['created_at'] = _now()

        columns = ', '.join(values.keys())
        placeholders = ', '.join('?' for _ in values)
        with self.conn:
            cursor = self.conn.execute(
                f"INSERT INTO sites ({columns}) VALUES ({placeholders})",
                tuple(values.values()),
            )
        logger.debug(f"Inserted site {site['domain']} (id {cursor.lastrowid})")
        return self.get_site(cursor.lastrowid)

    def update_site(self, site_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        values = {k: v for k, v in updates.items() if k in MUTABLE_SITE_FIELDS}
        return self._update_columns(site_id, values)

    def _update_columns(self, site_id: int, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        values = dict(values)
        values['updated_at'] = _now()
        assignments = ', '.join(f"{k} = ?" for k in values)
        with self.conn:
            cursor = self.conn.execute(
                f"UPDATE sites SET {assignments} WHERE id = ?",
                (*values.values(), site_id),
            )
        if cursor.rowcount == 0:
            return None
        return self.get_site(site_id)

    def delete_site(self, site_id: int) -> bool:
        with self.conn:
            cursor = self.conn.execute("DELETE FROM sites WHERE id = ?", (site_id,))
        logger.debug(f"Deleted site id {site_id} ({cursor.rowcount} row)")
        return cursor.rowcount > 0

    def insert_audit(self, site_id: int, audit: Dict[str, Any]) -> int:
        platform = audit.get('platform') or {}
        readiness = audit.get('directory_readiness') or {}
        requirements = readiness.get('requirements') or []
        blockers = [r['label'] for r in requirements if not r.get('passed')]
        confidence = (platform.get('confidence') or 0) / 100

        row = {
            'site_id': site_id,
            'domain': audit.get('domain'),
            'url': audit.get('url'),
            'audit_date': audit.get('audit_date') or _now(),
            'relay': audit.get('relay'),
            'total_score': audit.get('total_score', 0),
            'max_score': audit.get('max_score', 100),
            'platform_name': platform.get('name'),
            'platform_confidence': confidence,
            'platform_fixability': platform.get('fixability'),
            'platform_note': platform.get('note'),
            'readiness_tier': readiness.get('tier'),
            'readiness_percentage': readiness.get('percentage'),
            'readiness_passed': readiness.get('passed_count'),
            'readiness_total': readiness.get('total_count'),
            'checks_json': json.dumps(audit.get('checks') or {}),
            'categories_json': json.dumps(audit.get('categories') or {}),
            'requirements_json': json.dumps(requirements),
            'blockers_json': json.dumps(blockers),
            'quick_wins_json': json.dumps([]),
            'top_issues_json': json.dumps([]),
            'created_at': _now(),
        }

        columns = ', '.join(row.keys())
        placeholders = ', '.join('?' for _ in row)
        with self.conn:
            cursor = self.conn.execute(
                f"INSERT INTO audits ({columns}) VALUES ({placeholders})",
                tuple(row.values()),
            )
        audit_id = cursor.lastrowid

        self._update_columns(site_id, {
            'url': audit.get('url'),
            'latest_score': row['total_score'],
            'latest_audit_id': audit_id,
            'latest_audit_at': row['audit_date'],
            'platform_detected': row['platform_name'],
            'platform_confidence': confidence,
            'directory_readiness': row['readiness_tier'],
        })
        logger.debug(f"Saved audit {audit_id} for site id {site_id}")
        return audit_id

    def get_latest_audit(self, site_id: int) -> Optional[Dict[str, Any]]:
        row = self.conn.execute(
            "SELECT * FROM audits WHERE site_id = ? ORDER BY audit_date DESC, id DESC LIMIT 1",
            (site_id,),
        ).fetchone()
        if row is None:
            return None
        return self._audit_payload(dict(row))

    @staticmethod
    def _audit_payload(row: Dict[str, Any]) -> Dict[str, Any]:
        """Rebuild the AuditResult.to_dict() shape from an audit row."""
        confidence = row.get('platform_confidence')
        return {
            'id': row['id'],
            'site_id': row['site_id'],
            'domain': row['domain'],
            'url': row['url'],
            'audit_date': row['audit_date'],
            'relay': row['relay'],
            'platform': {
                'name': row['platform_name'],
                'confidence': round(confidence * 100) if confidence is not None else None,
                'fixability': row['platform_fixability'],
                'note': row['platform_note'],
            },
            'checks': json.loads(row['checks_json'] or '{}'),
            'categories': json.loads(row['categories_json'] or '{}'),
            'total_score': row['total_score'],
            'max_score': row['max_score'],
            'directory_readiness': {
                'tier': row['readiness_tier'],
                'percentage': row['readiness_percentage'],
                'passed_count': row['readiness_passed'],
                'total_count': row['readiness_total'],
                'requirements': json.loads(row['requirements_json'] or '[]'),
            },
            'blockers': json.loads(row['blockers_json'] or '[]'),
            'quick_wins': json.loads(row['quick_wins_json'] or '[]'),
            'top_issues': json.loads(row['top_issues_json'] or '[]'),
        }

    def insert_sprint_request(self, request: Dict[str, Any]) -> int:
        with self.conn:
            cursor = self.conn.execute(
                "INSERT INTO sprint_requests "
                "(site_id, organization_id, email, phone, readiness_tier, blockers_json, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    request.get('site_id'),
                    request.get('organization_id') or settings.ORGANIZATION_ID,
                    request.get('email'),
                    request.get('phone'),
                    request.get('readiness_tier'),
                    json.dumps(request.get('blockers') or []),
                    _now(),
                ),
            )
        logger.debug(f"Saved sprint request {cursor.lastrowid} for site id {request.get('site_id')}")
        return cursor.lastrowid


def get_db_client(
    backend: Optional[str] = None,
    **kwargs,
) -> AbstractDatabase:
    """Factory function to create the appropriate database client.

    Args:
        backend: Database backend ('local'). Defaults to settings.DB_BACKEND.
        **kwargs: Additional arguments passed to the database constructor.

    Returns:
        An instance of AbstractDatabase.

    Raises:
        ValueError: If an unknown backend is specified.
    """
    backend = backend or settings.DB_BACKEND

    if backend == "local":
        logger.info("Using local SQLite database backend")
        return LocalSqliteDatabase(**kwargs)
    else:
        raise ValueError(
            f"Unknown database backend: '{backend}'. "
            "Supported backends: 'local'"
        )
