"""
Model defaults and environment settings for the ABS Deal Modeler
"""
import os

# Scenario defaults
DEFAULT_BASE_RATE = 3.69  # SOFR assumption in %, used when no live rate is supplied
DEFAULT_SERVICING_FEE_BPS = 50  # 0.50% annual servicing/trustee fee
DEFAULT_OTHER_FEES_BPS = 100  # Admin/backup/insurance fees
DEFAULT_EQUITY_EXCESS_SHARE_PCT = 55  # % of excess spread released to equity in pro-rata mode
DEFAULT_PRICE_PCT = 100.0

# Engine
COLLATERAL_EPSILON = 0.1  # Pool considered paid off below this balance
OC_SENTINEL = 999.0  # OC% reported once all rated notes are retired

# Root finder
IRR_GUESS = 0.01
IRR_MAX_ITERATIONS = 50
IRR_TOLERANCE = 1e-7
IRR_FLOOR = -0.99

# Breakeven solver
BREAKEVEN_CDR_LOW = 0.0
BREAKEVEN_CDR_HIGH = 50.0
BREAKEVEN_MAX_ITERATIONS = 20
BREAKEVEN_TOLERANCE = 0.1
LOSS_THRESHOLD = 0.01  # Same units as balances ($mm)

# Market data
MARKET_DATA_URL = os.environ.get("MARKET_DATA_URL", "http://localhost:8000")
REQUEST_TIMEOUT_SECONDS = 10
CACHE_DURATION_MINUTES = 15
