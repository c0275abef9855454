# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Database layer for extracted vital signs.

This module handles SQLite persistence of one row per sampled frame.
Uses aiosqlite for async database operations.

Every public write/health method reports failure through its return value;
sqlite errors are logged here and never propagate to the sampling loop.

Usage:
    from vitalsign.persistence.database import Database

    db = Database("data/vital_signs.db")
    await db.initialize()
    await db.write(record)
    await db.close()
"""

import asyncio
import logging
import os
from datetime import datetime, timedelta
from typing import List, Optional

import aiosqlite

from vitalsign.models.record import ExtractedRecord

logger = logging.getLogger(__name__)

DB_ERRORS = (aiosqlite.Error, OSError, ValueError)


class Database:
    """Async SQLite sink for extracted vital signs.

    Attributes:
        db_path: Path to SQLite database file
    """

    def __init__(self, db_path: str):
        """Initialize database manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None
        logger.info(f"Database initialized (path: {db_path})")

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def initialize(self) -> bool:
        """Connect and create tables.

        Returns:
            True if the database is ready for writes
        """
        db_dir = os.path.dirname(self.db_path)
        if db_dir and not os.path.exists(db_dir):
            try:
                os.makedirs(db_dir)
            except OSError as e:
                logger.error(f"Failed to create database directory {db_dir}: {e}")
                return False
            logger.info(f"Created database directory: {db_dir}")

        if not await self.connect():
            return False

        try:
            await self._create_tables()
        except DB_ERRORS as e:
            logger.error(f"Failed to create database tables: {e}")
            return False

        logger.info("Database tables created/verified successfully")
        return True

    async def connect(self) -> bool:
        """Open the connection if it is not already open."""
        if self._connection is not None:
            logger.debug("Database already connected")
            return True

        try:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        except DB_ERRORS as e:
            logger.error(f"Database connection failed: {e}")
            self._connection = None
            return False

        logger.info("Database connected successfully")
        return True

    async def disconnect(self) -> None:
        """Close the connection, ignoring errors from a broken one."""
        if self._connection is None:
            return
        try:
            await self._connection.close()
        except DB_ERRORS as e:
            logger.warning(f"Error closing database connection: {e}")
        finally:
            self._connection = None
        logger.info("Database disconnected")

    async def close(self) -> None:
        """Close database connection."""
        await self.disconnect()

    async def _create_tables(self) -> None:
        """Create the vital_signs table and indexes if they don't exist."""
        async with self._connection.cursor() as cursor:
            await cursor.execute("""
                CREATE TABLE IF NOT EXISTS vital_signs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp DATETIME NOT NULL,
                    hr TEXT,
                    spo2 TEXT,
                    abp TEXT,
                    ecg_classification TEXT,
                    ecg_confidence REAL,
                    created_at DATETIME NOT NULL
                )
            """)

            await cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_vital_signs_timestamp
                ON vital_signs(timestamp)
            """)

            await cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_vital_signs_created_at
                ON vital_signs(created_at)
            """)

            await self._connection.commit()

    # ==================== Vital Sign Operations ====================

    async def insert_vital_sign(self, record: ExtractedRecord) -> int:
        """Insert one record.

        Returns:
            ID of the inserted row

        Raises:
            ValueError: If the database is not connected
            aiosqlite.Error: On SQL errors
        """
        if self._connection is None:
            raise ValueError("Database not connected")

        async with self._connection.cursor() as cursor:
            await cursor.execute("""
                INSERT INTO vital_signs
                (timestamp, hr, spo2, abp, ecg_classification, ecg_confidence, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                record.timestamp.isoformat(),
                record.hr,
                record.spo2,
                record.abp,
                record.ecg_classification,
                record.ecg_confidence,
                datetime.now().isoformat(),
            ))
            await self._connection.commit()
            return cursor.lastrowid

    async def write(self, record: ExtractedRecord) -> bool:
        """Sink interface: insert a record and report success."""
        try:
            row_id = await self.insert_vital_sign(record)
        except DB_ERRORS as e:
            logger.error(f"Failed to insert vital sign data: {e}")
            return False

        logger.debug(f"Vital sign data inserted (id={row_id})")
        return True

    async def get_recent_vital_signs(self, limit: int = 100) -> List[ExtractedRecord]:
        """Get the most recent records, newest first.

        Args:
            limit: Maximum number of records to return

        Returns:
            List of records (empty if not connected)
        """
        if self._connection is None:
            return []

        try:
            async with self._connection.cursor() as cursor:
                await cursor.execute("""
                    SELECT timestamp, hr, spo2, abp, ecg_classification, ecg_confidence
                    FROM vital_signs ORDER BY timestamp DESC, id DESC LIMIT ?
                """, (limit,))
                rows = await cursor.fetchall()
        except DB_ERRORS as e:
            logger.error(f"Failed to query vital signs: {e}")
            return []

        logger.debug(f"Retrieved {len(rows)} vital sign records")
        return [ExtractedRecord.from_dict(dict(row)) for row in rows]

    async def health_check(self) -> bool:
        """Run a trivial query to verify the connection."""
        if self._connection is None:
            return False
        try:
            async with self._connection.execute("SELECT 1") as cursor:
                row = await cursor.fetchone()
        except DB_ERRORS as e:
            logger.warning(f"Database health check failed: {e}")
            return False
        return row is not None

    async def reconnect(self, max_attempts: int = 3, delay_ms: int = 1000) -> bool:
        """Drop and re-open the connection with bounded retries.

        Args:
            max_attempts: Connection attempts before giving up
            delay_ms: Milliseconds to wait between attempts

        Returns:
            True if reconnected
        """
        logger.info("Attempting to reconnect to database...")

        for attempt in range(1, max_attempts + 1):
            logger.info(f"Reconnection attempt {attempt}/{max_attempts}")

            await self.disconnect()

            if await self.initialize():
                logger.info("Database reconnected successfully")
                return True

            if attempt < max_attempts:
                logger.warning(f"Reconnection failed, waiting {delay_ms}ms before retry...")
                await asyncio.sleep(delay_ms / 1000.0)

        logger.error(f"Failed to reconnect to database after {max_attempts} attempts")
        return False

    async def cleanup_old_vital_signs(self, days_to_keep: int = 30) -> int:
        """Delete records older than the retention window.

        Returns:
            Number of rows deleted (0 on error)
        """
        if self._connection is None:
            return 0

        cutoff = (datetime.now() - timedelta(days=days_to_keep)).isoformat()
        try:
            async with self._connection.cursor() as cursor:
                await cursor.execute("""
                    DELETE FROM vital_signs WHERE created_at < ?
                """, (cutoff,))
                deleted = cursor.rowcount
                await self._connection.commit()
        except DB_ERRORS as e:
            logger.error(f"Failed to clean up old vital signs: {e}")
            return 0

        if deleted:
            logger.info(f"Deleted {deleted} vital sign records older than {days_to_keep} days")
        return deleted
