# Log event / error codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
INVALID_TARGET_URL = 'INVALID_TARGET_URL'
SHORTCODE_GENERATION_FAILED = 'SHORTCODE_GENERATION_FAILED'
SHORTCODE_COLLISION = 'SHORTCODE_COLLISION'
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'
