import sqlite3
from dataclasses import replace
from typing import Optional

from ..utils.logger import log
from .trade import TradeRecord

_COLUMNS = (
    "id", "market_id", "model_name", "direction", "entry_price", "shares",
    "stake", "confidence", "edge", "indicators_json", "created_at",
    "outcome", "pnl", "exit_price", "resolved_at",
)

class TradeJournal:
    """sqlite store for paper trades. One connection, one owning thread."""

    def __init__(self, db_path: str):
        self.conn = sqlite3.connect(db_path)
        self._init_db()

    def _init_db(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS paper_trades (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                market_id       TEXT NOT NULL,
                model_name      TEXT,
                direction       TEXT,
                entry_price     REAL,
                shares          REAL,
                stake           REAL,
                confidence      REAL,
                edge            REAL,
                indicators_json TEXT,
                created_at      REAL,
                outcome         TEXT,
                pnl             REAL,
                exit_price      REAL,
                resolved_at     REAL
            )
        """)
        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_paper_trades_market ON paper_trades(market_id)"
        )
        # Migrate old DB: add settlement columns if missing
        existing = {row[1] for row in self.conn.execute("PRAGMA table_info(paper_trades)")}
        for col, ctype in [("exit_price", "REAL"), ("resolved_at", "REAL")]:
            if col not in existing:
                log.warning("Migrating paper_trades: adding column %s", col)
                self.conn.execute(f"ALTER TABLE paper_trades ADD COLUMN {col} {ctype}")
        self.conn.commit()

    @staticmethod
    def _row(row) -> TradeRecord:
        return TradeRecord(**dict(zip(_COLUMNS, row)))

    def _select(self, where: str = "", params: tuple = (), order: str = "created_at ASC, id ASC",
                limit: Optional[int] = None) -> list[TradeRecord]:
        sql = f"SELECT {', '.join(_COLUMNS)} FROM paper_trades"
        if where:
            sql += f" WHERE {where}"
        sql += f" ORDER BY {order}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        return [self._row(r) for r in self.conn.execute(sql, params).fetchall()]

    # ------------------------------------------------------------------
    def insert_trade(self, t: TradeRecord) -> TradeRecord:
        cur = self.conn.execute(
            "INSERT INTO paper_trades (market_id, model_name, direction, entry_price, shares, "
            "stake, confidence, edge, indicators_json, created_at) "
            "VALUES (?,?,?,?,?,?,?,?,?,?)",
            (t.market_id, t.model_name, t.direction, t.entry_price, t.shares,
             t.stake, t.confidence, t.edge, t.indicators_json, t.created_at),
        )
        self.conn.commit()
        return replace(t, id=cur.lastrowid)

    def settle_trade(self, trade_id: int, outcome: str, pnl: float,
                     exit_price: float, resolved_at: float) -> bool:
        """Write settlement fields once. Returns False if the trade was already settled."""
        cur = self.conn.execute(
            "UPDATE paper_trades SET outcome = ?, pnl = ?, exit_price = ?, resolved_at = ? "
            "WHERE id = ? AND outcome IS NULL",
            (outcome, pnl, exit_price, resolved_at, trade_id),
        )
        self.conn.commit()
        return cur.rowcount == 1

    def get_trade(self, trade_id: int) -> Optional[TradeRecord]:
        rows = self._select("id = ?", (trade_id,))
        return rows[0] if rows else None

    def get_trade_for_market(self, market_id: str) -> Optional[TradeRecord]:
        rows = self._select("market_id = ?", (str(market_id),), limit=1)
        return rows[0] if rows else None

    def pending_trades(self) -> list[TradeRecord]:
        return self._select("outcome IS NULL")

    def trades_by_model(self, model_name: str) -> list[TradeRecord]:
        return self._select("model_name = ?", (model_name,), order="created_at DESC, id DESC")

    def completed_trades(self) -> list[TradeRecord]:
        return self._select("outcome IN ('win', 'loss')", order="resolved_at ASC, id ASC")

    def total_trades(self) -> int:
        cur = self.conn.execute("SELECT COUNT(*) FROM paper_trades")
        return cur.fetchone()[0]

    def close(self):
        self.conn.close()
