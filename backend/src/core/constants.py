"""Application constants and configuration values."""

from decimal import Decimal

from core.config import FRONTEND_URL

# CORS origins for development and production
# Production URLs should be added via FRONTEND_URL environment variable
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",      # React dev server (Vite) - localhost
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Calendar grid
MONTHS_PER_YEAR = 12
MONTH_KEYS = [f"{i:02d}" for i in range(1, MONTHS_PER_YEAR + 1)]  # "01".."12", persisted month keys
MONTH_NAMES = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]
MONTH_NAMES_FULL = [
    "JANEIRO", "FEVEREIRO", "MARÇO", "ABRIL", "MAIO", "JUNHO",
    "JULHO", "AGOSTO", "SETEMBRO", "OUTUBRO", "NOVEMBRO", "DEZEMBRO",
]

# Rollup spans (number of month rows each change value covers in the comparison grid)
QUARTER_SPAN = 3
SEMESTER_SPAN = 6
ANNUAL_SPAN = 12

# Partner monthly series: a month belongs to a range when this day of the month falls inside it
PARTNER_SERIES_ANCHOR_DAY = 15

# Decline reasons a user can attach to a partner whose revenue dropped
DECLINE_REASONS = [
    'Concorrência',
    'Insatisfação',
    'Preço',
    'Recesso/Férias',
    'Doença/Gravidez',
    'Mudança/Aposentadoria',
    'Não sabe motivo',
]

# Expense categories of the annual financial record, in display order
EXPENSE_CATEGORIES = [
    ('rh', 'RH'),
    ('maintenance', 'Manutenção'),
    ('material', 'Material'),
    ('marketing', 'Marketing'),
    ('operational', 'Operacional'),
]
INVESTMENT_CATEGORY = ('equipment', 'Investimentos')

# Validation tolerance for money totals (1 cent)
CALCULATION_TOLERANCE = Decimal('0.01')

# Largest absolute amount accepted in a record; keeps cent rounding within Decimal precision
MAX_AMOUNT = Decimal('1e15')
