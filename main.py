"""Option Quoter - Entry Point.

Usage:
    python main.py quotes run
    python main.py quotes run -t AAPL -t SPY
    python main.py quotes rate
    python main.py quotes init-db
    python main.py quotes health --hours 24
    python main.py quotes info
"""

from option_quoter.cli import create_app

app = create_app()


if __name__ == "__main__":
    app()
