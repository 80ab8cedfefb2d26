# Log event / error codes
INVALID_REQUEST_PAYLOAD = 'INVALID_REQUEST_PAYLOAD'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
URL_MISMATCH = 'URL_MISMATCH'
UPDATE_SUCCESS = 'UPDATE_SUCCESS'
