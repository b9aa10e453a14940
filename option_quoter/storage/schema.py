"""SQL DDL 상수: SQLite 스키마 정의.

2개 테이블: option_quotes, risk_free_rate.
모두 IF NOT EXISTS로 멱등하게 생성됩니다.
"""

SCHEMA_SQL = """
-- 옵션 호가 (natural key = 수집 시각 + 계약 식별자)
CREATE TABLE IF NOT EXISTS option_quotes (
    time                TEXT    NOT NULL,
    ticker              TEXT    NOT NULL,
    expiration_date     TEXT    NOT NULL,
    strike              REAL    NOT NULL,
    type                TEXT    NOT NULL CHECK (type IN ('CALL', 'PUT')),
    bid                 REAL    DEFAULT 0.0,
    ask                 REAL    DEFAULT 0.0,
    last                REAL    DEFAULT 0.0,
    volume              INTEGER DEFAULT 0,
    open_interest       INTEGER DEFAULT 0,
    implied_volatility  REAL    DEFAULT 0.0,
    delta               REAL,
    prob_otm            REAL,
    underlying_last     REAL,
    PRIMARY KEY (time, ticker, expiration_date, strike, type)
);

CREATE INDEX IF NOT EXISTS idx_option_quotes_ticker ON option_quotes(ticker);
CREATE INDEX IF NOT EXISTS idx_option_quotes_time ON option_quotes(time);

-- 무위험 이자율 관측 (감사 / 헬스체크용)
CREATE TABLE IF NOT EXISTS risk_free_rate (
    timestamp   TEXT PRIMARY KEY,
    rate        REAL NOT NULL,
    source      TEXT NOT NULL
);
"""
