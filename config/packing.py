"""
Packing configuration constants.

Bucket alphabet, label wording and form defaults shared by the
allocation engine, the summary and the exports.
"""

# =============================================================================
# BUCKETS
# =============================================================================

# Fixed bucket order. Global case numbering follows this order.
BUCKET_NAMES = ("A", "B", "C", "D", "E", "F", "G", "H", "I", "J")

# Maximum fractional digits accepted for a bucket quantity
BUCKET_DECIMAL_PLACES = 1


# =============================================================================
# EXTRAS
# =============================================================================

EXTRA_ZERO_CASE = "zero_case"
EXTRA_SAMPLE = "sample"
EXTRA_LABEL = "label"

EXTRA_KEYS = (EXTRA_ZERO_CASE, EXTRA_SAMPLE, EXTRA_LABEL)


# =============================================================================
# LABELS
# =============================================================================

# Separator between bucket segments on one pallet, e.g. "A9-A10、B1-B5"
SEGMENT_SEPARATOR = "、"

UNIT_WORD = "units"
FULL_PALLET_WORD = "full pallets"
SHORT_FILL_WORD = "short-fill"

# Pallet summary when no capacity is configured
PALLET_TEXT_UNAVAILABLE = "unavailable"

# How an unknown total is shown in copy text and exports
UNKNOWN_TEXT = "-"

DEFAULT_TEMPLATE_NAME = "Not selected"


# =============================================================================
# SHARING
# =============================================================================

SHARE_TITLE = "Outer packing tool"
SHARE_PATH = "/packing/outer"
SHARE_QUERY_KEY = "data"
