"""
Calculator Configuration - Single source of truth for fee rates and tolerances.

Hong Kong public offer conventions: a 1% brokerage/levy charge on the allotted
amount ("winning fee") and a combined 0.13219% charge on sale proceeds
(stamp duty, trading fee, SFC and AFRC levies, CCASS fee).
"""

# Charged on the sale amount
SELL_FEE_RATE = 0.0013219

# Charged on the amount paid for allotted shares
WINNING_FEE_RATE = 0.01

# Applied-share counts closer than this are the same tier
SHARE_TOLERANCE = 0.01

# Financing interest is simple interest on an actual/365 basis
DAYS_PER_YEAR = 365

# Stock codes are compared left-padded to at least this width
MIN_PADDED_WIDTH = 4

# Calculator field defaults (form values before any input)
FIELD_DEFAULTS = {
    "issue_price": None,
    "applied_shares": None,
    "allotted_shares": None,
    "sell_price": None,
    "application_fee": 100.0,  # Broker handling fee per application (HKD)
    "sell_fee": 0.0,
    "leverage_enabled": False,
    "leverage_multiple": 1.0,
    "annual_financing_rate": 3.68,  # Margin loan rate (% p.a.)
    "holding_days": 3.0,  # Days between application and refund/listing
}
