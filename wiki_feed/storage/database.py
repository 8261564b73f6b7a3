"""Database storage for wiki_feed.

This module provides async SQLite storage for served articles and likes.
Database location: ~/.wiki_feed/wiki_feed.db (or WIKI_FEED_DB_PATH env var)
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import aiosqlite

from wiki_feed.errors import ArticleNotFoundError, PersistenceError
from wiki_feed.models.schemas import Article

logger = logging.getLogger(__name__)


async def init_database(db: aiosqlite.Connection) -> None:
    """Create tables if they don't exist.

    Args:
        db: Open database connection
    """
    await db.execute("PRAGMA foreign_keys = ON")

    await db.execute("""
        CREATE TABLE IF NOT EXISTS articles (
            id INTEGER PRIMARY KEY,
            title TEXT NOT NULL,
            extract TEXT NOT NULL,
            thumbnail TEXT,
            url TEXT NOT NULL,
            created_at TEXT DEFAULT (datetime('now'))
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS likes (
            article_id INTEGER NOT NULL UNIQUE,
            liked_at TEXT DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
            FOREIGN KEY (article_id) REFERENCES articles (id) ON DELETE CASCADE
        )
    """)

    await db.commit()


def _row_to_article(row: aiosqlite.Row, is_liked: bool) -> Article:
    return Article(
        id=row["id"],
        title=row["title"],
        extract=row["extract"],
        thumbnail=row["thumbnail"],
        url=row["url"],
        is_liked=is_liked,
    )


class Database:
    """Article and like storage over one aiosqlite connection.

    The connection is opened lazily on first use.

    Args:
        db_path: SQLite file path, or ":memory:"
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None

    async def connect(self) -> aiosqlite.Connection:
        """Open the connection and initialize the schema if needed."""
        if self._conn is None:
            if self.db_path != ":memory:":
                Path(self.db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(self.db_path)
            conn.row_factory = aiosqlite.Row
            await init_database(conn)
            self._conn = conn
            logger.info(f"Connected to the SQLite database at {self.db_path}")
        return self._conn

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def save_article(self, article: Article) -> int:
        """Store an article unless it is already known.

        Returns:
            The article id
        """
        db = await self.connect()
        await db.execute(
            """
            INSERT OR IGNORE INTO articles (id, title, extract, thumbnail, url)
            VALUES (?, ?, ?, ?, ?)
            """,
            (article.id, article.title, article.extract, article.thumbnail, article.url),
        )
        await db.commit()
        return article.id

    async def save_articles(self, articles: Sequence[Article]) -> None:
        """Store several articles in one transaction."""
        db = await self.connect()
        await db.executemany(
            """
            INSERT OR IGNORE INTO articles (id, title, extract, thumbnail, url)
            VALUES (?, ?, ?, ?, ?)
            """,
            [(a.id, a.title, a.extract, a.thumbnail, a.url) for a in articles],
        )
        await db.commit()

    async def get_article_by_id(self, article_id: int) -> Optional[Article]:
        """Get an article with its like status.

        Returns:
            Article if found, None otherwise
        """
        db = await self.connect()
        cursor = await db.execute(
            """
            SELECT a.*, l.article_id IS NOT NULL AS is_liked
            FROM articles a
            LEFT JOIN likes l ON a.id = l.article_id
            WHERE a.id = ?
            """,
            (article_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return _row_to_article(row, bool(row["is_liked"]))

    async def like_article(self, article_id: int) -> None:
        """Like an article. Liking twice is a no-op.

        Raises:
            ArticleNotFoundError: If the article was never stored
            PersistenceError: If the write fails
        """
        if await self.get_article_by_id(article_id) is None:
            raise ArticleNotFoundError(article_id)

        db = await self.connect()
        try:
            await db.execute(
                "INSERT OR IGNORE INTO likes (article_id) VALUES (?)",
                (article_id,),
            )
            await db.commit()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Error liking article {article_id}: {e}") from e

    async def unlike_article(self, article_id: int) -> None:
        """Remove a like. Unliking an article that isn't liked is a no-op.

        Raises:
            PersistenceError: If the write fails
        """
        db = await self.connect()
        try:
            await db.execute("DELETE FROM likes WHERE article_id = ?", (article_id,))
            await db.commit()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Error unliking article {article_id}: {e}") from e

    async def get_liked_articles(self) -> List[Article]:
        """All liked articles, most recently liked first."""
        db = await self.connect()
        cursor = await db.execute("""
            SELECT a.*
            FROM articles a
            JOIN likes l ON a.id = l.article_id
            ORDER BY l.liked_at DESC, l.rowid DESC
        """)

        articles = []
        async for row in cursor:
            articles.append(_row_to_article(row, True))
        return articles

    async def is_article_liked(self, article_id: int) -> bool:
        db = await self.connect()
        cursor = await db.execute(
            "SELECT article_id FROM likes WHERE article_id = ?", (article_id,)
        )
        return await cursor.fetchone() is not None

    async def add_like_status(self, articles: Sequence[Article]) -> List[Article]:
        """Annotate articles with their like status.

        Returns the articles unchanged if the lookup fails.
        """
        try:
            db = await self.connect()
            cursor = await db.execute("SELECT article_id FROM likes")
            liked_ids = {row["article_id"] async for row in cursor}
        except aiosqlite.Error as e:
            logger.error(f"Error adding like status to articles: {e}")
            return list(articles)

        return [a.with_liked(a.id in liked_ids) for a in articles]
