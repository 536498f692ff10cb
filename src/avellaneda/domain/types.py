"""Type aliases for market making domain concepts.

Prices, quantities and model parameters are all arbitrary-precision
Decimals; timestamps are integer milliseconds since the Unix epoch.
"""

from decimal import Decimal

# Price value in the market
Price = Decimal

# Signed size of an order or position (positive = long, negative = short)
Quantity = Decimal

# Annualized volatility
Volatility = Decimal

# Risk aversion parameter (gamma)
RiskAversion = Decimal

# Order intensity parameter (k)
OrderIntensity = Decimal

# Milliseconds since the Unix epoch, or a millisecond duration
TimestampMs = int

ZERO = Decimal("0")
ONE = Decimal("1")
TWO = Decimal("2")
