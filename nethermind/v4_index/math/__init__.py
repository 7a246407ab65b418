from .position_key import calculate_position_key
from .pricing import format_price, sqrt_price_x96_to_token_prices
from .shared import Q96, Q192, is_native_currency
