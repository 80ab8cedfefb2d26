# Log event / error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
RATE_LIMITED = 'RATE_LIMITED'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
