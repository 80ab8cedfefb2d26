# Log event / error codes
INVALID_REQUEST_PAYLOAD = 'INVALID_REQUEST_PAYLOAD'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
URL_MISMATCH = 'URL_MISMATCH'
DELETE_SUCCESS = 'DELETE_SUCCESS'
